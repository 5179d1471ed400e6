"""Smoke test a running PlantLens server: analyze an image, then download its report.

Usage:
    python scripts/smoke_api.py path/to/plant.jpg [--api http://localhost:5000]
"""

import argparse
import mimetypes
import os
import time

import requests


def smoke_analyze(api: str, image_path: str) -> dict:
    print("=== /analyze ===")
    mime = mimetypes.guess_type(image_path)[0] or "image/jpeg"
    with open(image_path, "rb") as f:
        t0 = time.time()
        r = requests.post(
            f"{api}/analyze",
            files={"image": (os.path.basename(image_path), f, mime)},
            timeout=300,
        )
    elapsed = time.time() - t0
    body = r.json()
    print(f"  Status: {r.status_code} | {elapsed:.1f}s")
    if r.status_code != 200:
        print(f"  Error: {body}")
        raise SystemExit(1)
    print(f"  Image field: {body['image'][:40]}...")
    print(f"  Result:\n{body['result']}")
    print()
    return body


def smoke_download(api: str, analysis: dict, out_path: str) -> None:
    print("=== /download ===")
    r = requests.post(f"{api}/download", json=analysis, timeout=120)
    print(f"  Status: {r.status_code} | {r.headers.get('content-type')}")
    print(f"  Disposition: {r.headers.get('content-disposition')}")
    if r.status_code != 200:
        print(f"  Error: {r.json()}")
        raise SystemExit(1)
    with open(out_path, "wb") as f:
        f.write(r.content)
    print(f"  Saved {len(r.content)} bytes to {out_path}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("image")
    parser.add_argument("--api", default="http://localhost:5000")
    parser.add_argument("--out", default="plant_analysis_report.pdf")
    args = parser.parse_args()

    analysis = smoke_analyze(args.api, args.image)
    smoke_download(args.api, analysis, args.out)


if __name__ == "__main__":
    main()
