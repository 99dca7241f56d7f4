"""Download the deployed classifier into the local model cache."""
from __future__ import annotations

import argparse
from pathlib import Path

from oncoscan.config import get_settings
from oncoscan.services.inference import download_model


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Fetch the OncoScan model from MODEL_URL")
    parser.add_argument("--url", default=settings.model_url, help="Model URL (default: MODEL_URL)")
    parser.add_argument("--cache-dir", type=Path, default=Path(settings.model_cache_dir), help="Download directory")
    args = parser.parse_args()

    if not args.url:
        parser.error("No model URL given; pass --url or set MODEL_URL")
    path = download_model(args.url, args.cache_dir)
    print(f"Model available at {path}")


if __name__ == "__main__":
    main()
