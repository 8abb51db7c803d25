"""Command line entry point for autoupdater.

Maps command line options onto saved settings and selection criteria,
then runs the check, list or update pipeline.
"""

import argparse
import logging
import sys
from typing import List, Optional

from autoupdater import __version__
from autoupdater.config.credentials import CredentialManager
from autoupdater.config.paths import get_log_file_path
from autoupdater.config.settings import SettingsManager, UpdaterSettings
from autoupdater.updater.exceptions import NoMatchingReleaseError, UpdaterError
from autoupdater.updater.github_client import GitHubClient
from autoupdater.updater.manager import UpdateManager
from autoupdater.updater.version import compare_versions, strict_compare_versions
from autoupdater.utils.logging import get_logger, setup_logging
from autoupdater.utils.validators import (
    validate_api_host,
    validate_owner,
    validate_per_page,
    validate_repo,
    validate_timeout,
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="autoupdater",
        description="Check for and install newer releases of a program.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--owner", help="repository owner")
    common.add_argument("--repo", help="repository name")
    common.add_argument("--api-host", help="API host (default api.github.com)")
    common.add_argument("--token", help="API token (default: saved token)")
    common.add_argument("--save-token", action="store_true",
                        help="store --token in the system keyring")
    common.add_argument("--forget-token", action="store_true",
                        help="remove the saved token from the system keyring")
    common.add_argument("--prerelease", action="store_true", default=None,
                        help="include prereleases")
    common.add_argument("--branch", help="only releases targeting this branch")
    common.add_argument("--tag", help="only the release with this tag")
    common.add_argument("--asset", help="only releases with this asset")
    common.add_argument("--current-version", help="version currently running")
    common.add_argument("--strict", action="store_true",
                        help="only accept tags of the form [letters]X.Y.Z[letters]")
    common.add_argument("--per-page", type=int, help="releases per page (1-100)")
    common.add_argument("--ca-bundle", help="CA bundle for TLS verification")
    common.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("check", parents=[common], help="report a newer release")
    commands.add_parser("list", parents=[common], help="list matching releases")
    update = commands.add_parser("update", parents=[common],
                                 help="download and install a newer release")
    update.add_argument("--executable", help="file to replace (default: this program)")
    return parser


def merge_settings(settings: UpdaterSettings, args: argparse.Namespace) -> UpdaterSettings:
    """Override saved settings with command line options."""
    overrides = {
        "owner": args.owner,
        "repo": args.repo,
        "api_host": args.api_host,
        "allow_prerelease": args.prerelease,
        "branch": args.branch,
        "asset_name": args.asset,
        "per_page": args.per_page,
        "ca_bundle": args.ca_bundle,
    }
    data = settings.to_dict()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return UpdaterSettings.from_dict(data)


def validate_settings(settings: UpdaterSettings) -> List[str]:
    """Collect validation errors for the update source."""
    errors = []
    for is_valid, error in (
        validate_owner(settings.owner),
        validate_repo(settings.repo),
        validate_api_host(settings.api_host),
        validate_per_page(settings.per_page),
        validate_timeout(settings.timeout),
    ):
        if not is_valid:
            errors.append(error)
    return errors


def _print_progress(fraction: float) -> None:
    sys.stderr.write(f"\rDownloading... {fraction * 100:5.1f}%")
    if fraction >= 1.0:
        sys.stderr.write("\n")
    sys.stderr.flush()


def run(args: argparse.Namespace, settings_manager: Optional[SettingsManager] = None) -> int:
    """Execute a parsed command and return the exit code."""
    settings_manager = settings_manager or SettingsManager()
    settings = merge_settings(settings_manager.load(), args)

    errors = validate_settings(settings)
    if errors:
        for error in errors:
            print(f"error: {error}", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "update" and not args.executable and not getattr(sys, "frozen", False):
        # argv[0] is the program itself only in a frozen build
        print("error: --executable is required unless running as a frozen build",
              file=sys.stderr)
        return EXIT_USAGE

    credentials = CredentialManager()
    token = args.token
    if args.forget_token:
        credentials.delete_token(settings.api_host, settings.owner)
    if token and args.save_token:
        credentials.save_token(settings.api_host, settings.owner, token)
    if not token and not args.forget_token:
        token = credentials.get_token(settings.api_host, settings.owner)

    criteria = settings.to_criteria(
        baseline_version=args.current_version,
        required_tag=args.tag,
    )
    comparator = strict_compare_versions if args.strict else compare_versions

    backend = GitHubClient(
        settings.owner,
        settings.repo,
        api_host=settings.api_host,
        auth_token=token,
        timeout=settings.timeout,
        ca_bundle=settings.ca_bundle,
    )

    with UpdateManager(
        backend,
        criteria=criteria,
        comparator=comparator,
        per_page=settings.per_page,
    ) as manager:
        if args.command == "list":
            for release in manager.list_releases():
                marker = " (prerelease)" if release.is_prerelease else ""
                print(f"{release.tag}{marker}\t{release.display_name}")
            return EXIT_OK

        if args.command == "check":
            release = manager.check_for_update()
            if release is None:
                print(f"{args.current_version} is up to date")
            else:
                print(release)
            return EXIT_OK

        release = manager.update(
            progress_callback=_print_progress,
            current_executable=args.executable,
        )
        if release is None:
            print(f"{args.current_version} is up to date")
        else:
            print(f"Updated to {release.tag}")
        return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application entry point.

    Returns:
        Exit code (0 for success)
    """
    args = build_parser().parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=get_log_file_path(),
    )
    logger = get_logger("main")

    try:
        return run(args)
    except NoMatchingReleaseError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except UpdaterError as e:
        logger.error(f"Update failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
