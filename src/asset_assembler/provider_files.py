"""Hosting provider configuration files.

_headers and _redirects ship with every deploy. netlify.toml only goes into
source archives built server-side, where the provider needs to know what to
publish.
"""

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://connect.facebook.net "
    "https://www.googletagmanager.com https://www.clarity.ms; "
    "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
    "font-src 'self' https://fonts.gstatic.com; "
    "img-src 'self' data: https: blob:; "
    "connect-src 'self' https:; "
    "frame-src 'self' https://www.youtube.com https://player.vimeo.com; "
    "object-src 'none'"
)

SECURITY_HEADERS = (
    ("X-Frame-Options", "DENY"),
    ("X-Content-Type-Options", "nosniff"),
    ("Referrer-Policy", "strict-origin-when-cross-origin"),
    ("Permissions-Policy", "geolocation=(), microphone=(), camera=()"),
    ("Content-Security-Policy", CONTENT_SECURITY_POLICY),
)

CACHE_RULES = (
    ("/index.html", (("Cache-Control", "no-cache"),)),
    ("/styles.css", (("Content-Type", "text/css; charset=utf-8"),
                     ("Cache-Control", "public, max-age=3600, must-revalidate"))),
    ("/app.js", (("Content-Type", "application/javascript; charset=utf-8"),
                 ("Cache-Control", "public, max-age=3600, must-revalidate"))),
)

SPA_FALLBACK = "/*    /index.html   200"


def _block(path: str, headers) -> str:
    lines = [path] + [f"  {name}: {value}" for name, value in headers]
    return "\n".join(lines)


def build_headers_file() -> str:
    blocks = [_block("/*", SECURITY_HEADERS)]
    blocks.extend(_block(path, headers) for path, headers in CACHE_RULES)
    return "\n\n".join(blocks) + "\n"


def build_redirects_file() -> str:
    return SPA_FALLBACK + "\n"


def build_netlify_toml() -> str:
    return """[build]
  publish = "."
  command = "echo 'static site, nothing to build'"

[[redirects]]
  from = "/*"
  to = "/index.html"
  status = 200
"""
