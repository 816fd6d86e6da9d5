# metigan/__main__.py
# Entry point: python -m metigan send|contact ...
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

from metigan.config.settings import Settings
from metigan.domain.errors import MetiganError
from metigan.infrastructure.filesystem.attachments import load_attachment
from metigan.interface_adapters.client import Metigan

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="metigan", description="Metigan email API client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Send an email")
    send.add_argument("--from", dest="sender", required=True)
    send.add_argument("--to", dest="recipients", action="append", required=True, help="Repeat for several recipients")
    send.add_argument("--subject", required=True)
    body = send.add_mutually_exclusive_group(required=True)
    body.add_argument("--content", help="HTML/text body")
    body.add_argument("--content-file", type=Path, help="Read the body from a file")
    send.add_argument("--attach", action="append", type=Path, default=[], help="File to attach (repeatable)")
    send.add_argument("--tracking-id", default="")

    contact = sub.add_parser("contact", help="Look up a contact")
    contact.add_argument("email")
    contact.add_argument("--audience", required=True)
    return parser


def run(args: argparse.Namespace, client: Metigan) -> object:
    if args.command == "send":
        content = args.content if args.content is not None else args.content_file.read_text(encoding="utf-8")
        return client.send_email(
            sender=args.sender,
            recipients=args.recipients,
            subject=args.subject,
            content=content,
            attachments=[load_attachment(p) for p in args.attach],
            tracking_id=args.tracking_id,
        )
    return client.get_contact(args.email, args.audience)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    settings = Settings()
    try:
        client = Metigan.from_env(settings)
        result = run(args, client)
    except MetiganError as exc:
        logger.error("%s", exc.formatted_message())
        return 1
    except OSError:
        logger.exception("Could not read input file")
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
