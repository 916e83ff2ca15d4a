"""Demo entry point for logberry."""

from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

import logberry
from logberry import HIDDEN, field_tags


@dataclass
class DemoConfig:
    """Parameters reported with the configuration event."""

    workers: int = 4
    endpoint: str = "localhost:8000"
    token: str = field_tags(HIDDEN, default="demo-token")


def main():
    """Run a short logged session on the default root."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    logberry.setup_logging()

    log = logberry.get_main()
    logberry.configuration_event(log, DemoConfig())
    logberry.process_event(log)

    job = log.long_task("Compute checksums", {"Files": 3})
    total = 0
    for name in ("alpha", "beta", "gamma"):
        total += sum(name.encode())
        job.info("Checksummed file", {"Name": name})
    job.success({"Total": total})

    try:
        int("not a number")
    except ValueError as exc:
        log.task("Parse input").error(exc, {"Input": "not a number"})

    log.end()
    logberry.reset()


if __name__ == "__main__":
    main()
