#!/usr/bin/env python3

import argparse
import json
import os
import sys

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from wp_contentful.migrators.contentful_migrator import error_details, list_published_assets  # noqa: E402
from wp_contentful.utils.config import CONFIG_FILE, load_config  # noqa: E402


def ensure_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)


def main():
    parser = argparse.ArgumentParser(description="List the published assets of the Contentful environment.")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file.")
    parser.add_argument("--out", default="data/contentful_assets.json", help="Output file.")
    args = parser.parse_args()

    config = load_config(config_file=args.config)
    ctf = config["contentful"]
    if not ctf.get("access_token") or not ctf.get("space_id"):
        print("CONTENTFUL_ACCESS_TOKEN and CONTENTFUL_SPACE_ID must be set", file=sys.stderr)
        sys.exit(1)

    print("Fetching published assets...")
    try:
        assets = list_published_assets(ctf, ctf["locale"])
    except requests.RequestException as e:
        print(f"Failed to list assets: {error_details(e)}", file=sys.stderr)
        sys.exit(1)

    ensure_dir(args.out)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(assets, f, ensure_ascii=False, indent=2)
    print(f"Assets saved to: {args.out} (total: {len(assets)})")


if __name__ == "__main__":
    main()
