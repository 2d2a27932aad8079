import os
from dataclasses import dataclass, field
from datetime import timedelta

import requests
import tqdm as progress_bar

from fetcher_errors import DownloadError, FilesystemError, RemoteError

API_ENDPOINT = "https://api.zoom.us/v2"
PAGE_SIZE = 300
MAX_QUERY_DAYS = 30
BLOCK_SIZE = 32 * 1024  # 32 Kibibytes

_REQUIRED = object()


def _field(record, name, expected_type, default=_REQUIRED):
    """
    Pull one field out of a decoded API object. Missing optional fields get
    ``default``; anything present must have the expected type.
    """
    if name not in record or record[name] is None:
        if default is _REQUIRED:
            raise RemoteError(f"malformed response: missing '{name}'")
        return default

    raw = record[name]
    if not isinstance(raw, expected_type):
        raise RemoteError(
            f"malformed response: '{name}' should be {expected_type.__name__}, "
            f"got {type(raw).__name__}"
        )
    return raw


def _object(raw, what):
    if not isinstance(raw, dict):
        raise RemoteError(f"malformed response: {what} is not an object")
    return raw


# These only contain the fields the fetcher uses.


@dataclass(frozen=True)
class RecordingFile:
    file_type: str
    download_url: str

    @classmethod
    def from_api(cls, raw):
        raw = _object(raw, "recording file")
        return cls(
            file_type=_field(raw, "file_type", str),
            download_url=_field(raw, "download_url", str),
        )


@dataclass(frozen=True)
class MeetingRecord:
    start_time: str
    timezone: str = ""
    recording_files: tuple = field(default_factory=tuple)

    @classmethod
    def from_api(cls, raw):
        raw = _object(raw, "meeting")
        files = _field(raw, "recording_files", list, [])
        return cls(
            start_time=_field(raw, "start_time", str),
            timezone=_field(raw, "timezone", str, ""),
            recording_files=tuple(RecordingFile.from_api(f) for f in files),
        )


def _discard(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def per_delta(start, end, delta):
    """Split the inclusive range [start, end] into consecutive windows of at most ``delta``."""
    curr = start
    while curr <= end:
        window_end = min(curr + delta - timedelta(days=1), end)
        yield curr, window_end
        curr = window_end + timedelta(days=1)


class ZoomClient:
    def __init__(self, credentials, session=None, endpoint=API_ENDPOINT):
        self.credentials = credentials
        self.session = session or requests.Session()
        self.endpoint = endpoint

    def authorization_header(self):
        return {
            "Authorization": f"Bearer {self.credentials.authorization_token()}",
            "Content-Type": "application/json",
        }

    def make_request(self, method, url, params=None):
        """Make an authenticated API request and return the decoded JSON."""
        headers = self.authorization_header()
        try:
            response = self.session.request(method, url, params=params, headers=headers)
            response.raise_for_status()
        except requests.HTTPError as e:
            raise RemoteError(
                f"Zoom API error: {e.response.status_code} {e.response.text}"
            ) from e
        except requests.RequestException as e:
            raise RemoteError(f"couldn't reach the Zoom API: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Zoom API returned invalid JSON: {e}") from e

    def list_meetings(self, user, start_date=None, end_date=None):
        """
        Fetch every recorded meeting of ``user``, following pagination.
        ``start_date`` and ``end_date`` bound the query when given; Zoom only
        answers for about a month at a time, so a longer range is requested
        in MAX_QUERY_DAYS chunks.
        """
        url = f"{self.endpoint}/users/{requests.utils.quote(user, safe='@')}/recordings"
        if start_date is None or end_date is None:
            return self._list_window(url, start_date, end_date)

        meetings = []
        for start, end in per_delta(start_date, end_date, timedelta(days=MAX_QUERY_DAYS)):
            meetings.extend(self._list_window(url, start, end))
        return meetings

    def _list_window(self, url, start_date, end_date):
        meetings = []
        next_page_token = ""

        while True:
            params = {"page_size": PAGE_SIZE, "next_page_token": next_page_token}
            if start_date is not None:
                params["from"] = start_date.strftime("%Y-%m-%d")
            if end_date is not None:
                params["to"] = end_date.strftime("%Y-%m-%d")

            data = _object(self.make_request("GET", url, params=params), "recording list")
            for meeting in _field(data, "meetings", list, []):
                meetings.append(MeetingRecord.from_api(meeting))

            next_page_token = _field(data, "next_page_token", str, "")
            if not next_page_token:
                break

        return meetings

    def download(self, url, target_path):
        """
        Stream ``url`` into ``target_path``. Bytes go to a ``.part`` file
        first, so an interrupted download never leaves a file at the target.
        """
        part_path = target_path + ".part"
        token = self.credentials.authorization_token()

        try:
            response = self.session.get(url, params={"access_token": token}, stream=True)
        except requests.RequestException as e:
            raise DownloadError(f"couldn't download {url}: {e}") from e

        try:
            response.raise_for_status()
        except requests.RequestException as e:
            response.close()
            raise DownloadError(f"couldn't download {url}: {e}") from e

        # total size in bytes.
        total_size = int(response.headers.get("content-length", 0) or 0)
        prog_bar = progress_bar.tqdm(
            dynamic_ncols=True,
            total=total_size,
            unit="iB",
            unit_scale=True,
            desc=os.path.basename(target_path),
        )
        try:
            with open(part_path, "wb") as fd:
                for chunk in response.iter_content(BLOCK_SIZE):
                    prog_bar.update(len(chunk))
                    fd.write(chunk)
            os.replace(part_path, target_path)
        # requests exceptions are OSErrors too, so they go first.
        except requests.RequestException as e:
            _discard(part_path)
            raise DownloadError(f"download of {url} was interrupted: {e}") from e
        except OSError as e:
            _discard(part_path)
            raise FilesystemError(f"couldn't write {target_path}: {e}") from e
        finally:
            prog_bar.close()
            response.close()
