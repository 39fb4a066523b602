"""
asnetkit Quickstart Example
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import List

from pydantic import BaseModel

from asnetkit import (
    AsyncSession,
    BearerTokenAdapter,
    JSONEncoding,
    MultipartFormData,
    NetworkKitError,
    Session,
    SessionConfig,
)

BASE_URL = os.getenv("ASNETKIT_DEMO_URL", "https://httpbin.org")


class Slideshow(BaseModel):
    title: str
    author: str
    slides: List[dict]


class SlideshowDocument(BaseModel):
    slideshow: Slideshow


def main():
    # Reads ASNETKIT_* variables; debug=True prints request lifecycle logs
    config = SessionConfig.from_env(debug=True)
    token = os.getenv("DEMO_TOKEN")

    with Session(config=config, adapters=[BearerTokenAdapter(lambda: token)]) as session:
        print("Fetching JSON...")
        data = session.request(f"{BASE_URL}/get", params={"q": "python"}).validate().json()
        print(f"✓ Query echoed back: {data['args']}")

        print("\nDecoding into a model...")
        document = session.request(f"{BASE_URL}/json").validate(
            content_types=["application/json"]
        ).decode(SlideshowDocument)
        print(f"✓ {document.slideshow.title} by {document.slideshow.author}")

        print("\nPosting JSON with a callback...")
        future = session.request(
            f"{BASE_URL}/post", "POST", {"name": "Arindam"}, JSONEncoding()
        ).response_json(lambda result: print(f"✓ Callback result: {result!r:.80}"))
        future.result()

        print("\nUploading a multipart form...")
        form = MultipartFormData()
        form.append_text("Arindam", name="author")
        form.append(b"hello", name="file", filename="hello.txt", mime_type="text/plain")
        echoed = session.upload_multipart(form, f"{BASE_URL}/post").validate().json()
        print(f"✓ Server saw fields {echoed['form']} and files {list(echoed['files'])}")

        print("\nDownloading...")
        destination = Path(tempfile.gettempdir()) / "asnetkit-demo.png"
        path = session.download(f"{BASE_URL}/image/png", destination).validate().file()
        print(f"✓ Saved {path.stat().st_size} bytes to {path}")

        print("\nHandling a rejected response...")
        try:
            session.request(f"{BASE_URL}/status/418").validate().data()
        except NetworkKitError as e:
            print(f"✓ Got {e!r}")

    print("\nSame call with asyncio...")
    print(f"✓ {asyncio.run(fetch_async())}")

    print("\n✓ Quickstart complete!")


async def fetch_async() -> str:
    async with AsyncSession() as session:
        return await session.request(f"{BASE_URL}/uuid").validate().string()


if __name__ == "__main__":
    main()
