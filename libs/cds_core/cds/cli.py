"""
Command-line client for a Beckn Catalog Discovery Service.

Examples:
  cds-client --key-file key.json discover --role provider --text "ev driver"
  cds-client --allow-unsigned discover --lat 12.97 --lon 77.59 --radius-km 5
  cds-client --key-file key.json publish catalogues.json
  cds-client --key-file key.json sign body.json
  cds-client --key-file key.json pubkey
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import orjson

from .client import CdsHttpClient, CdsResult
from .config import load_config
from .constants import ROLE_DRIVER, ROLE_PROVIDER
from .discovery import DiscoverQuery, GeoFilter
from .errors import CdsError
from .http_sig import composite_key_id, sign_request
from .security.keystore import KeyStore, keystore_from_env


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cds-client",
        description="Signed Beckn CDS discover/publish client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument("--base-url", help="CDS base URL (default: $CDS_BASE_URL)")
    p.add_argument("--api-key", help="CDS API key sent as x-api-key (default: $CDS_API_KEY)")
    p.add_argument("--key-file", help="Signing key JSON {subscriberId, keyId, privateKey}")
    p.add_argument("--allow-unsigned", action="store_true", help="Send requests unsigned when no key is loaded")
    p.add_argument("--no-filter", action="store_true", help="Return discover results without role filtering")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = p.add_subparsers(dest="command", required=True)

    d = sub.add_parser("discover", help="Search the catalog")
    d.add_argument("--role", choices=[ROLE_PROVIDER, ROLE_DRIVER], help="Caller role")
    d.add_argument("--text", help="Free text search")
    d.add_argument("--jsonpath", help="JSONPath filter expression")
    d.add_argument("--lat", type=float, help="Latitude of search centre")
    d.add_argument("--lon", type=float, help="Longitude of search centre")
    d.add_argument("--radius-km", type=float, help="Search radius in km")

    pub = sub.add_parser("publish", help="Publish catalogues from a JSON file")
    pub.add_argument("file", help="JSON list of catalogues, or {'catalogs': [...]}")

    s = sub.add_parser("sign", help="Print Digest/Authorization headers for a body file")
    s.add_argument("file", help="Body file; its exact bytes are signed")

    sub.add_parser("pubkey", help="Print the public key of the current signing key")
    return p


def _load_keystore(key_file: Optional[str]) -> KeyStore:
    if key_file:
        ks = KeyStore()
        ks.load_key_file(key_file)
        return ks
    return keystore_from_env()


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False), flush=True)


def _print_result(res: CdsResult) -> int:
    _print_json(dataclasses.asdict(res))
    return 0 if res.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config()
        keystore = _load_keystore(args.key_file)

        if args.command == "sign":
            headers = sign_request(keystore, Path(args.file).read_bytes())
            _print_json(headers.as_headers())
            return 0

        if args.command == "pubkey":
            identity = keystore.current_identity()
            _print_json({"key_id": composite_key_id(identity), "public_key": keystore.public_key_b64()})
            return 0

        if args.command == "discover":
            coords = (args.lat, args.lon, args.radius_km)
            if any(c is not None for c in coords) and not all(c is not None for c in coords):
                print("--lat, --lon and --radius-km must be given together", file=sys.stderr)
                return 2
            geo = GeoFilter(args.lat, args.lon, args.radius_km) if args.lat is not None else None
            query = DiscoverQuery(text_search=args.text, jsonpath=args.jsonpath, geo=geo)
            if query.is_empty():
                print("at least one search criterion is required", file=sys.stderr)
                return 2
        else:
            data = orjson.loads(Path(args.file).read_bytes())
            catalogs = data.get("catalogs") if isinstance(data, dict) else data
            if not isinstance(catalogs, list):
                print("publish file must hold a list of catalogues", file=sys.stderr)
                return 2

        if args.base_url:
            config.base_url = args.base_url
        if args.api_key:
            config.api_key = args.api_key
        if args.allow_unsigned:
            config.allow_unsigned = True

        with CdsHttpClient.from_config(config, keystore=keystore, filter_responses=not args.no_filter) as client:
            if args.command == "discover":
                return _print_result(client.discover(query, role=args.role))
            return _print_result(client.publish(catalogs))
    except json.JSONDecodeError as e:
        print(f"invalid JSON input: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except (CdsError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
