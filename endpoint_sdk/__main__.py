"""Resolve the backend address once and print it: ``python -m endpoint_sdk``."""

from __future__ import annotations

import asyncio
import json
import sys

from endpoint_sdk.service import build_service
from endpoint_sdk.tier0_core.errors import ConfigurationError


async def _resolve() -> dict:
    service = build_service()
    endpoint = await service.discover()
    return endpoint.as_dict()


def main() -> int:
    try:
        result = asyncio.run(_resolve())
    except ConfigurationError as exc:
        print(json.dumps(exc.to_dict()), file=sys.stderr)
        return 2
    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
