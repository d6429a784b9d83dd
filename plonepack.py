import argparse
import json
import os
import sys

from portal.config import CONFIG_FILE, ResolverOptions, load_options, write_defaults
from portal.console import error_log, log, set_verbose
from portal.errors import PloneResolveError
from portal.models import RequestKind, ResolutionRequest
from resolver import PloneResolver


def build_resolver(args):
    try:
        options = load_options(
            args.config,
            portal_url=args.portal_url,
            debug=True if args.debug else None,
            prober=args.prober,
            prober_root=args.prober_root,
        )
        return PloneResolver(options)
    except (FileNotFoundError, ValueError, PloneResolveError) as e:
        error_log(f"Invalid configuration:\n{e}")
        sys.exit(1)


def request_from_args(args):
    return ResolutionRequest(
        request=args.request,
        path=args.context or "",
        query=args.query or "",
        kind=RequestKind(args.kind),
    )


def cmd_classify(args):
    resolver = build_resolver(args)
    classification = resolver.classify(request_from_args(args))
    print(f"{classification.strategy.value}\t{classification.target or ''}")


def cmd_resolve(args):
    resolver = build_resolver(args)
    result = resolver.resolve(request_from_args(args))
    if result.is_err():
        error_log(str(result.error))
        sys.exit(2)
    location = result.value
    if args.json:
        print(location.model_dump_json() if location else "null")
    elif location is None:
        log("Not resolved; the bundler continues with its default chain.")
    else:
        print(str(location))


def cmd_batch(args):
    """Resolve a JSON list of requests concurrently and print JSON results."""
    if args.filename == "-":
        entries = json.load(sys.stdin)
    else:
        if not os.path.exists(args.filename):
            error_log(f"File '{args.filename}' not found.")
            sys.exit(1)
        with open(args.filename, "r") as f:
            entries = json.load(f)

    resolver = build_resolver(args)
    requests = [ResolutionRequest(**entry) for entry in entries]
    log(f"Resolving {len(requests)} request(s) against {resolver.portal_url}...")
    results = resolver.resolve_all(requests)

    report = []
    failures = 0
    for request, result in zip(requests, results):
        entry = {"request": request.request, "kind": request.kind.value, "location": None, "error": None}
        if result.is_err():
            failures += 1
            entry["error"] = result.error.model_dump(mode="json")
        elif result.value is not None:
            entry["location"] = result.value.model_dump()
        report.append(entry)
    print(json.dumps(report, indent=2))
    if failures:
        error_log(f"{failures} request(s) failed.")
        sys.exit(2)


def cmd_defaults(args):
    print(json.dumps(ResolverOptions().model_dump(by_alias=True), indent=2))


def cmd_init(args):
    if os.path.exists(CONFIG_FILE) and not args.force:
        error_log(f"{CONFIG_FILE} already exists (use --force to overwrite).")
        sys.exit(1)
    write_defaults(CONFIG_FILE)
    log(f"Wrote default options to {CONFIG_FILE}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Resolve bundler requests against a Plone portal")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help=f"Options file (default: ./{CONFIG_FILE} if present)")
    parser.add_argument("--portal-url", help="Portal URL (e.g. http://localhost:8080/Plone)")
    parser.add_argument("--prober", choices=["http", "filesystem"], help="Existence check to use")
    parser.add_argument("--prober-root", help="Mirror directory for the filesystem prober")
    parser.add_argument("--debug", action="store_true", help="Log every candidate the prober tries")
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (("classify", "Show the strategy for a request"),
                            ("resolve", "Resolve a request")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("request")
        sub.add_argument("--context", help="Directory the request was issued from")
        sub.add_argument("--query", help="Query string to pass through")
        sub.add_argument("--kind", choices=["file", "module"], default="file")
        if name == "resolve":
            sub.add_argument("--json", action="store_true", help="Print the location as JSON")

    subparsers.add_parser("batch", help="Resolve a JSON list of requests").add_argument(
        "filename", nargs="?", default="-", help="JSON file (default: read from stdin)")
    subparsers.add_parser("defaults", help="Print default options")
    subparsers.add_parser("init", help=f"Write {CONFIG_FILE}").add_argument("--force", action="store_true")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    if args.command == "classify": cmd_classify(args)
    elif args.command == "resolve": cmd_resolve(args)
    elif args.command == "batch": cmd_batch(args)
    elif args.command == "defaults": cmd_defaults(args)
    elif args.command == "init": cmd_init(args)
    else: parser.print_help()


if __name__ == "__main__":
    main()
