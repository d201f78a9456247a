"""
Mapping of file extensions to content types. We use a fixed table rather
than the ``mimetypes`` module, because the latter depends on the platform.
"""

import os


MIME_TYPES = {
    # Web
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
    # Media
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    # Other
    ".pdf": "application/pdf",
    ".wasm": "application/wasm",
    ".map": "application/json",
}

DEFAULT_TYPE = "application/octet-stream"

TEXT_TYPES = "application/json", "application/xml", "image/svg+xml"


def get_content_type(file_path):
    """ Get the content type for the given file name, based on its extension.
    Returns "application/octet-stream" for unknown extensions.
    """
    ext = os.path.splitext(file_path)[1].lower()
    return MIME_TYPES.get(ext, DEFAULT_TYPE)


def is_text_type(content_type):
    """ Get whether the given content type represents text (as opposed
    to binary data).
    """
    return content_type.startswith("text/") or content_type in TEXT_TYPES
