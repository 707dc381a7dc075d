import argparse
import json
import sys

from dotenv import load_dotenv, find_dotenv

from coachnudge.config import load_settings
from coachnudge.context import build_context
from coachnudge.nudges.scheduler import run_scheduler
from coachnudge.utils.logging import configure_logging


def run_once() -> int:
    report = run_scheduler(build_context(load_settings()))
    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.success else 1


def serve(host: str, port: int) -> int:
    import uvicorn
    from coachnudge.web.server import create_app

    uvicorn.run(create_app(), host=host, port=port)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="coachnudge", description="Coaching nudge scheduler and Slack callback service")
    sub = parser.add_subparsers(dest="command")
    serve_parser = sub.add_parser("serve", help="run the HTTP service")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    sub.add_parser("run-once", help="run a single scheduler tick and print the report")
    args = parser.parse_args(argv)

    # Load env vars
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging(load_settings().log_level)

    if args.command == "run-once":
        return run_once()
    return serve(getattr(args, "host", "0.0.0.0"), getattr(args, "port", 8000))


if __name__ == "__main__":
    sys.exit(main())
