"""
RestBridge CLI

Command-line interface for converting, generating and sending requests.

Commands:
    curl              - Parse a cURL command into a canonical request
    import-postman    - Convert a Postman collection to a canonical collection
    import-openapi    - Convert an OpenAPI/Swagger document to a canonical collection
    export-postman    - Convert a canonical collection to Postman v2.1
    env-from-openapi  - Build an environment file from an OpenAPI document
    codegen           - Generate a code snippet for a request
    send              - Send a request (or a whole collection)

Examples:
    restbridge curl "curl -X POST https://api.example.com/users -d '{\"a\": 1}'"
    restbridge import-openapi petstore.yaml -o petstore.collection.json
    restbridge codegen petstore.collection.json --request "List pets" --lang go
    restbridge send petstore.collection.json --all --env dev.environment.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .codegen import LANGUAGES, generate_code
from .common.config import EngineConfig
from .common.utils import DocumentLoader
from .convert.curl_parser import parse_curl_command
from .convert.environment import export_environment, import_environment
from .convert.openapi import import_openapi_spec, openapi_environment
from .convert.postman import PostmanExporter, import_postman_collection
from .execute.executor import RequestExecutor, build_history_entry
from .models import ApiRequest, Collection, KeyValue
from .resolve.auth import resolve_effective_auth


logger = logging.getLogger("restbridge")


def _load_config(args) -> EngineConfig:
    try:
        return EngineConfig.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Failed to load config: {e}")
        sys.exit(1)


def _setup_logging(config: EngineConfig):
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.WARNING))


def _write_output(text: str, output: Optional[str], description: str):
    """Write text to a file, or to stdout when no output path is given."""
    if not output:
        print(text)
        return

    output_file = Path(output)
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(text)
    except OSError as e:
        print(f"❌ Error writing to {output}: {e}")
        sys.exit(1)

    print(f"✓ Saved {description} → {output}", file=sys.stderr)


def _load_text(path: str) -> str:
    try:
        return DocumentLoader(path).load()
    except FileNotFoundError as e:
        print(f"❌ {e}")
        sys.exit(1)


def _load_environment_variables(path: Optional[str]) -> List[KeyValue]:
    if not path:
        return []
    try:
        return import_environment(_load_text(path)).variables
    except ValueError as e:
        print(f"❌ Failed to load environment: {e}")
        sys.exit(1)


def _load_target(path: str, request_name: Optional[str]) -> Tuple[Optional[Collection], ApiRequest]:
    """
    Load a canonical request or pick one out of a canonical collection.

    Returns:
        (collection or None, request)
    """
    try:
        data = DocumentLoader(path).load_json()
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)

    if not isinstance(data, dict):
        print(f"❌ {path} is not a canonical request or collection")
        sys.exit(1)

    if 'folders' not in data and 'variables' not in data:
        return None, ApiRequest.from_dict(data)

    collection = Collection.from_dict(data)
    candidates = list(collection.iter_requests())
    if not candidates:
        print(f"❌ Collection '{collection.name}' has no requests")
        sys.exit(1)

    if request_name is None:
        if len(candidates) > 1:
            print(f"❌ Collection has {len(candidates)} requests; choose one with --request")
            for req in candidates:
                print(f"   • {req.name}")
            sys.exit(1)
        return collection, candidates[0]

    for req in candidates:
        if req.name == request_name or req.id == request_name:
            return collection, req

    print(f"❌ Request not found: {request_name}")
    sys.exit(1)


def cmd_curl(args, config: EngineConfig):
    """Parse a cURL command (inline or from a file) into a canonical request."""
    command = _load_text(args.file) if args.file else ' '.join(args.curl_args)
    request = parse_curl_command(command, config)
    if request is None:
        print("❌ Could not parse cURL command")
        sys.exit(1)

    _write_output(json.dumps(request.to_dict(), indent=2, ensure_ascii=False), args.output, "request")


def cmd_import_postman(args, config: EngineConfig):
    try:
        collection = import_postman_collection(_load_text(args.file))
    except ValueError as e:
        print(f"❌ Failed to import Postman collection: {e}")
        sys.exit(1)

    _write_output(json.dumps(collection.to_dict(), indent=2, ensure_ascii=False), args.output, "collection")


def cmd_import_openapi(args, config: EngineConfig):
    try:
        collection = import_openapi_spec(_load_text(args.file))
    except ValueError as e:
        print(f"❌ Failed to import OpenAPI spec: {e}")
        sys.exit(1)

    _write_output(json.dumps(collection.to_dict(), indent=2, ensure_ascii=False), args.output, "collection")


def cmd_export_postman(args, config: EngineConfig):
    try:
        data = DocumentLoader(args.file).load_json()
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)

    collection = Collection.from_dict(data)

    if args.output:
        try:
            PostmanExporter.export(collection, args.output)
        except OSError:
            sys.exit(1)
    else:
        print(PostmanExporter.dumps(collection))


def cmd_env_from_openapi(args, config: EngineConfig):
    try:
        environment = openapi_environment(_load_text(args.file), name=args.name)
    except ValueError as e:
        print(f"❌ Failed to build environment: {e}")
        sys.exit(1)

    _write_output(export_environment(environment), args.output, "environment")


def cmd_codegen(args, config: EngineConfig):
    collection, request = _load_target(args.file, args.request)
    environment_variables = _load_environment_variables(args.env)

    variables = list(collection.variables if collection else []) + environment_variables
    inherited_auth = resolve_effective_auth(request, collection) if collection else None

    code = generate_code(args.lang, request, variables, inherited_auth)
    _write_output(code, args.output, f"{LANGUAGES[args.lang]} snippet")


def cmd_send(args, config: EngineConfig):
    environment_variables = _load_environment_variables(args.env)
    executor = RequestExecutor(config)

    if args.all:
        try:
            data = DocumentLoader(args.file).load_json()
        except (FileNotFoundError, ValueError) as e:
            print(f"❌ {e}")
            sys.exit(1)
        collection = Collection.from_dict(data)
        results = executor.execute_collection(collection, environment_variables, max_workers=args.workers)
    else:
        collection, request = _load_target(args.file, args.request)
        collection_variables = collection.variables if collection else []
        inherited_auth = resolve_effective_auth(request, collection) if collection else None
        response = executor.execute(request, collection_variables, environment_variables, inherited_auth)
        results = [(request, response)]

    history = []
    failures = 0
    for request, response in results:
        marker = "✓" if response.ok else "❌"
        print(f"{marker} {request.method} {request.name} → {response.status} {response.status_text} ({response.time_ms}ms)")
        if not response.ok:
            failures += 1
        if args.history:
            entry = build_history_entry(
                request,
                response,
                collection.variables if collection else [],
                environment_variables
            )
            history.append(entry.to_dict())

    if len(results) == 1 and not args.all:
        print(results[0][1].body)

    if args.history:
        _write_output(json.dumps(history, indent=2, ensure_ascii=False), args.history, "history")

    if failures:
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='restbridge',
        description="RestBridge - convert, generate and send HTTP requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Parse a cURL command
  %(prog)s curl "curl -H 'Accept: application/json' https://api.example.com/users"

  # Import an OpenAPI document and generate Python code for one operation
  %(prog)s import-openapi petstore.yaml -o petstore.json
  %(prog)s codegen petstore.json --request "List pets" --lang python

  # Send every request in a collection with an environment
  %(prog)s send petstore.json --all --env dev.environment.json
        """
    )
    parser.add_argument('--config', help='YAML config file (default: $RESTBRIDGE_CONFIG)')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- CURL command ---
    curl_parser = subparsers.add_parser('curl', help='Parse a cURL command')
    curl_parser.add_argument('curl_args', nargs='*', metavar='command', help='cURL command text')
    curl_parser.add_argument('-f', '--file', help="Read the command from a file ('-' for stdin)")
    curl_parser.add_argument('-o', '--output', help='Save request JSON to file')

    # --- IMPORT-POSTMAN command ---
    postman_parser = subparsers.add_parser('import-postman', help='Import a Postman v2.1 collection')
    postman_parser.add_argument('file', help="Postman collection JSON ('-' for stdin)")
    postman_parser.add_argument('-o', '--output', help='Save collection JSON to file')

    # --- IMPORT-OPENAPI command ---
    openapi_parser = subparsers.add_parser('import-openapi', help='Import an OpenAPI/Swagger document')
    openapi_parser.add_argument('file', help="OpenAPI JSON or YAML ('-' for stdin)")
    openapi_parser.add_argument('-o', '--output', help='Save collection JSON to file')

    # --- EXPORT-POSTMAN command ---
    export_parser = subparsers.add_parser('export-postman', help='Export a collection as Postman v2.1')
    export_parser.add_argument('file', help='Collection JSON')
    export_parser.add_argument('-o', '--output', help='Output Postman collection file')

    # --- ENV-FROM-OPENAPI command ---
    env_parser = subparsers.add_parser('env-from-openapi', help='Build an environment from an OpenAPI document')
    env_parser.add_argument('file', help="OpenAPI JSON or YAML ('-' for stdin)")
    env_parser.add_argument('--name', help='Environment name')
    env_parser.add_argument('-o', '--output', help='Save environment JSON to file')

    # --- CODEGEN command ---
    codegen_parser = subparsers.add_parser('codegen', help='Generate a code snippet')
    codegen_parser.add_argument('file', help='Request or collection JSON')
    codegen_parser.add_argument('-l', '--lang', choices=list(LANGUAGES), default='curl',
                                help='Target language (default: curl)')
    codegen_parser.add_argument('-r', '--request', help='Request name or id within a collection')
    codegen_parser.add_argument('-e', '--env', help='Environment JSON file')
    codegen_parser.add_argument('-o', '--output', help='Save snippet to file')

    # --- SEND command ---
    send_parser = subparsers.add_parser('send', help='Send a request')
    send_parser.add_argument('file', help='Request or collection JSON')
    send_parser.add_argument('-r', '--request', help='Request name or id within a collection')
    send_parser.add_argument('-e', '--env', help='Environment JSON file')
    send_parser.add_argument('--all', action='store_true', help='Send every request in the collection')
    send_parser.add_argument('-w', '--workers', type=int, default=5, help='Concurrent workers for --all (default: 5)')
    send_parser.add_argument('--history', help='Save history entries to JSON file')

    return parser


COMMANDS = {
    'curl': cmd_curl,
    'import-postman': cmd_import_postman,
    'import-openapi': cmd_import_openapi,
    'export-postman': cmd_export_postman,
    'env-from-openapi': cmd_env_from_openapi,
    'codegen': cmd_codegen,
    'send': cmd_send,
}


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    config = _load_config(args)
    _setup_logging(config)
    handler(args, config)


if __name__ == '__main__':
    main()
