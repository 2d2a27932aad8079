#!/usr/bin/env python3

# Program Name: zoom-recording-fetcher
# Description:  Downloads a user's recent Zoom cloud recordings into a
#               date-organized folder tree, one file per recording type,
#               and optionally emails a summary of what is new. Re-running
#               is safe: files already on disk are never fetched again.

# System modules
import argparse
import os
import signal
import sys as system
from datetime import datetime, timedelta, timezone

from artifact_planner import plan
from console import Color
from credentials import ConfigCredentials, ParameterStoreCredentials
from fetcher_config import RangeMode, load_config, parse_config
from fetcher_errors import FetcherError, FilesystemError, InvalidTimeZone
from meeting_time import in_range, round_to_hour, to_local_time
from notification import (
    DeliveryMode,
    SesNotifier,
    SmtpNotifier,
    notify_new_recordings,
)
from zoom_client import ZoomClient

APP_VERSION = "1.0"


class RecordingFetcher:
    """
    Collects the recordings of one user's recent meetings.

    In LOCAL mode every planned file that is not on disk yet is downloaded;
    in REMOTE mode nothing is downloaded and the manifest just reports what
    would be new. Either way ``run`` returns the manifest: the planned
    artifacts handled in this run, in meeting and recording order.
    """

    def __init__(self, config, client, mode=DeliveryMode.LOCAL):
        self.config = config
        self.client = client
        self.mode = mode

    @property
    def query_bounded(self):
        """True if the API query alone decides which meetings are recent."""
        return self.config.range_mode == RangeMode.QUERY

    def query_window(self, now):
        if self.query_bounded:
            return (now - timedelta(days=self.config.days)).date(), now.date()

        # Pad both ends by a day; in_range() has the final say.
        return (
            (now - timedelta(days=self.config.days + 1)).date(),
            (now + timedelta(days=1)).date(),
        )

    def run(self, now=None):
        now = now or datetime.now(timezone.utc)
        start_date, end_date = self.query_window(now)

        print(
            f"{now.strftime('%Y-%m-%d')}: fetching {self.config.user}'s meetings "
            f"for past {self.config.days} days to {self.config.output_dir}"
        )
        meetings = self.client.list_meetings(self.config.user, start_date, end_date)
        print(f"    > Found {len(meetings)} recorded meetings")

        manifest = []
        handled = set()

        for meeting in meetings:
            try:
                local_time = to_local_time(meeting.start_time, meeting.timezone)
            except InvalidTimeZone as e:
                print(
                    f"{Color.YELLOW}### Skipping meeting at {meeting.start_time}: {e}{Color.END}",
                    file=system.stderr,
                )
                continue

            if not self.query_bounded and not in_range(local_time, self.config.days, now):
                continue

            meeting_time = round_to_hour(local_time)

            for artifact in plan(self.config.output_dir, meeting, meeting_time):
                if artifact.target_path in handled:
                    continue
                handled.add(artifact.target_path)

                if os.path.isfile(artifact.target_path):
                    continue

                self.materialize(artifact, meeting_time)
                manifest.append(artifact)

        return manifest

    def materialize(self, artifact, meeting_time):
        if self.mode == DeliveryMode.REMOTE:
            print(f"    > New .{artifact.file_extension} file for meeting at {meeting_time}")
            return

        folder = os.path.dirname(artifact.target_path)
        try:
            os.makedirs(folder, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"couldn't create {folder}: {e}") from e

        print(f"    > Downloading .{artifact.file_extension} file for meeting at {meeting_time}")
        self.client.download(artifact.source_url, artifact.target_path)


def fetch_and_notify(config, credentials, mode, notifier, now=None):
    client = ZoomClient(credentials)
    manifest = RecordingFetcher(config, client, mode).run(now)

    if manifest:
        print(f"{Color.GREEN}✓ {len(manifest)} new recording file(s){Color.END}")
    else:
        print("No new recordings.")

    notify_new_recordings(manifest, config, mode, notifier)
    return manifest


def handle_graceful_shutdown(signal_received, frame):
    print(f"\n{Color.DARK_CYAN}SIGINT or CTRL-C detected. Exiting gracefully.{Color.END}")

    system.exit(0)


def handler(event, context):
    """
    Serverless entry point. ``event`` carries the configuration keys; the
    API key and secret name SSM parameters. Nothing is downloaded: the
    summary links to the recordings on Zoom and goes out through SES.
    """
    config = parse_config(event)
    manifest = fetch_and_notify(
        config,
        ParameterStoreCredentials(config),
        DeliveryMode.REMOTE,
        SesNotifier(config.sender),
    )
    return {"recordings": len(manifest)}


# ################################################################
# #                        MAIN                                  #
# ################################################################


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="zoom-recording-fetcher",
        description="Field recorder for Zoom: fetch recent cloud recordings.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Alternative config file (default: ~/.zoom-lomax)",
    )
    parser.add_argument(
        "--remote",
        action="store_true",
        help="Don't download anything; report new recordings by their Zoom URLs.",
    )
    parser.add_argument(
        "--credentials",
        choices=["config", "parameter-store"],
        default="config",
        help="Where the API key and secret come from. With 'parameter-store'\n"
        "the configured api_key and api_secret name SSM parameters.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    args = parser.parse_args(argv)

    # tell Python to shutdown gracefully when SIGINT is received
    signal.signal(signal.SIGINT, handle_graceful_shutdown)

    try:
        config = load_config(args.config)
        if args.credentials == "parameter-store":
            credentials = ParameterStoreCredentials(config)
        else:
            credentials = ConfigCredentials(config)
        mode = DeliveryMode.REMOTE if args.remote else DeliveryMode.LOCAL

        fetch_and_notify(
            config, credentials, mode, SmtpNotifier(config.sender, config.smtp_host)
        )
    except FetcherError as e:
        print(f"{Color.RED}{e}{Color.END}", file=system.stderr)
        system.exit(1)


if __name__ == "__main__":
    main()
