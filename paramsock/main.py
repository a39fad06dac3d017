from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List, Optional, Sequence

from paramsock.core import ProtocolConnection
from paramsock.protocol.errors import ProtocolError
from paramsock.protocol.messages import Message
from paramsock.settings import ConfigError, load_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="paramsock")
    parser.add_argument("--env", default=".env", help="dotenv file with PARAMSOCK_* settings")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="send one message and print the reply")
    send.add_argument("--host")
    send.add_argument("--port", type=int)
    send.add_argument("--param", action="append", default=[], metavar="NAME=VALUE")
    send.add_argument("parts", nargs="+")
    return parser


def parse_params(pairs: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected NAME=VALUE, got {pair!r}")
        params[name] = value
    return params


def run_send(args: argparse.Namespace, env_path: str) -> int:
    settings = load_settings(env_path)
    logging.basicConfig(level=settings.log_level)
    host = args.host or settings.host
    port = args.port or settings.port
    message = Message(parts=list(args.parts), named_parameters=parse_params(args.param))

    with ProtocolConnection.connect(
        host,
        port,
        timeout=settings.read_timeout,
        buffer_size=settings.buffer_size,
        max_field_size=settings.max_field_size,
        missing_start=settings.missing_start,
        strict=settings.strict,
    ) as conn:
        conn.write_message(message)
        reply = conn.read_message()
    print(reply)
    return 1 if reply.is_error else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run_send(args, args.env)
    except ValueError as exc:
        parser.error(str(exc))
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
    except ProtocolError as exc:
        logger.error("Protocol error: %s", exc)
    except OSError as exc:
        logger.error("Connection failed: %s", exc)
    return 1


if __name__ == "__main__":
    sys.exit(main())
