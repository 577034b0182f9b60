"""Allow ``python -m hls_sanitizer``."""

from .main import main

if __name__ == "__main__":
    raise SystemExit(main())
