import argparse
import json
import sys
from typing import Any, Dict

from apichecker.core.corpus import DEFAULT_CORPUS, load_corpus
from apichecker.core.engine import Engine, PROBES
from apichecker.core.errors import ApiCheckerError
from apichecker.core.models import ProbeConfig
from apichecker.reporters.console import Log


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="API security posture checker")
    p.add_argument("probe", choices=[cls.key for cls in PROBES] + ["all", "serve"],
                   help="Probe to run, 'all' for the batch, 'serve' for the HTTP API")
    p.add_argument("-t", "--target", help="Base URL (ej: http://127.0.0.1:5000)")
    p.add_argument("-e", "--endpoint", help="Path appended to the target")
    p.add_argument("-p", "--param", action="append", default=[],
                   help="Parameter to inject (repeatable)")
    p.add_argument("--path", action="append", default=[],
                   help="Path for endpoint discovery (repeatable)")
    p.add_argument("--username-field", help="Login body field for the username (default: username)")
    p.add_argument("--password-field", help="Login body field for the password (default: password)")
    p.add_argument("--attempts", type=int, help="brute-force: login attempts (default: 50)")
    p.add_argument("--requests", type=int, dest="request_count",
                   help="rate-limiting: concurrent requests (default: 100)")
    p.add_argument("--time-window", type=int, help="rate-limiting: window in ms (default: 1000)")
    p.add_argument("--samples", type=int, help="timing-attacks: samples (default: 20)")
    p.add_argument("--max-concurrency", type=int,
                   help="Cap on in-flight requests for rate-limiting (default: unbounded)")
    p.add_argument("--username", help="Known-good username for authentication checks")
    p.add_argument("--password", help="Known-good password for authentication checks")
    p.add_argument("--token", help="JWT to analyse")
    p.add_argument("--corpus", help="JSON file overriding payload lists")
    p.add_argument("--json", action="store_true", help="Print reports as JSON")
    p.add_argument("--host", help="serve: bind address")
    p.add_argument("--port", type=int, help="serve: port")
    p.add_argument("-v", "--verbose", action="count", default=1,
                   help="-v, -vv")
    return p


_SCALAR_FLAGS = ("endpoint", "username_field", "password_field", "attempts", "request_count",
                 "time_window", "samples", "token", "max_concurrency")


def config_fields(args) -> Dict[str, Any]:
    """ProbeConfig fields given on the command line. Unset flags are left out."""
    fields = {name: getattr(args, name) for name in _SCALAR_FLAGS
              if getattr(args, name) is not None}
    if args.param:
        fields["parameters"] = tuple(args.param)
    if args.path:
        fields["common_paths"] = tuple(args.path)
    if args.username and args.password:
        fields["credentials"] = (args.username, args.password)
    return fields


def config_from_args(args) -> ProbeConfig:
    return ProbeConfig(target_url=(args.target or "").rstrip("/"), **config_fields(args))


def exit_code(reports) -> int:
    if any(r.status == "error" for r in reports):
        return 2
    return 1 if any(r.findings for r in reports) else 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    log = Log(verbose=args.verbose, stream=sys.stderr if args.json else None)

    try:
        corpus = load_corpus(args.corpus) if args.corpus else DEFAULT_CORPUS
    except ApiCheckerError as exc:
        log.fail(str(exc))
        return 2

    engine = Engine(corpus=corpus, logger=log)

    if args.probe == "serve":
        from apichecker.server import serve
        serve(args.host, args.port, engine)
        return 0

    if args.probe == "all":
        if not args.target:
            log.fail("--target is required for 'all'")
            return 2
        # flags given with 'all' apply to every probe in the batch
        fields = config_fields(args)
        overrides = {key: fields for key in engine.keys()} if fields else None
        reports = engine.run_all(args.target.rstrip("/"), overrides)
    else:
        reports = [engine.run(args.probe, config_from_args(args))]

    if args.json:
        data = [r.to_dict() for r in reports]
        json.dump(data if len(data) > 1 else data[0], sys.stdout, indent=2)
        sys.stdout.write("\n")
    return exit_code(reports)


if __name__ == "__main__":
    sys.exit(main())
