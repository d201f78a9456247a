"""
Example that uses the routing functions in a custom handler: requests
with a secret cookie get a normal response, others get the maintenance
page.
"""

import os
import asyncio

import begone


table = begone.PageTable(os.path.join(os.path.dirname(__file__), "pages"))


async def main(request):
    if "letmein=1" in request.headers.get("cookie", ""):
        return "<html>Everything is fine for you</html>"

    routes, default_page = table.snapshot()
    match = begone.find_match(routes, request.host, request.path, has_query=False)
    if match is None:
        if default_page is None:
            return 503, {}, "Down for maintenance"
        match = begone.RouteMatch(
            default_page, default_page.file_path, default_page.content_type
        )

    loop = asyncio.get_event_loop()
    with open(match.file_path, "rb") as f:
        body = await loop.run_in_executor(None, f.read)
    return 503, {"content-type": match.content_type, "retry-after": "60"}, body


app = begone.to_asgi(main)


if __name__ == "__main__":
    begone.run(app, "uvicorn", "localhost:8080")
