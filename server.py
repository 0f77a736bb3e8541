import logging
import threading
import time
import webbrowser

import uvicorn

from linkhub import settings


def run_uvicorn():
    """
    Run the FastAPI app via uvicorn in this process
    (called in a background thread).
    """
    config = uvicorn.Config(
        "linkhub.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="info",
        reload=False,
    )
    server = uvicorn.Server(config)
    server.run()


def open_browser_once():
    url = f"http://{settings.HOST}:{settings.PORT}/docs"
    print(f"[server] Opening {url}")
    try:
        webbrowser.open(url)
    except webbrowser.Error:
        print("[server] Could not open a browser.")


def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not settings.ENDPOINT_URL:
        print("[server] LINKHUB_ENDPOINT_URL not set, running on the local cache only.")

    t = threading.Thread(target=run_uvicorn, daemon=True)
    t.start()

    # give it a moment to boot before opening browser
    time.sleep(1.0)
    if settings.OPEN_BROWSER:
        open_browser_once()

    print("[server] Serving. Press Ctrl+C to quit.")
    try:
        while t.is_alive():
            time.sleep(1.0)
    except KeyboardInterrupt:
        print("\n[server] Shutting down.")


if __name__ == "__main__":
    main()
