"""
Serve a small pages directory that is created in a temporary directory.
Try e.g.:

* http://localhost:8080/ -> the default page.
* http://127.0.0.1:8080/ -> the page for 127.0.0.1.
* http://127.0.0.1:8080/api/status -> a JSON page.

While the server runs, the pages directory is watched for changes.
"""

import os
import tempfile

import begone


pages = {
    "default.html": "<html><h1>We'll be back soon!</h1></html>",
    "127.0.0.1/index.json": '{"status": "maintenance"}',
    "127.0.0.1/about.html": "<html>This is about 127.0.0.1</html>",
    "127.0.0.1/api/status.json": '{"status": "down", "retry": 3600}',
}

pages_dir = tempfile.mkdtemp(prefix="begone_example_")
for relpath, text in pages.items():
    filename = os.path.join(pages_dir, *relpath.split("/"))
    os.makedirs(os.path.dirname(filename), exist_ok=True)
    with open(filename, "wt", encoding="utf-8") as f:
        f.write(text)

print("Pages are in", pages_dir)
app = begone.make_app(pages_dir, retry_after=600, watch=True)


if __name__ == "__main__":
    begone.run(app, "uvicorn", "localhost:8080")
