import os
from dataclasses import dataclass

import pathvalidate as path_validate

from meeting_time import date_key, time_key


@dataclass(frozen=True)
class PlannedArtifact:
    """Where one recording file of a meeting goes, and where it comes from."""

    date_key: str
    time_key: str
    file_extension: str
    target_path: str
    source_url: str

    @property
    def filename(self):
        return os.path.basename(self.target_path)


def format_filename(normalized_time, file_type):
    file_extension = file_type.lower()
    filename = f"{time_key(normalized_time)}.{file_extension}"
    return file_extension, path_validate.sanitize_filename(filename)


def plan(output_dir, meeting, normalized_time):
    """
    Plan one artifact per recording file of ``meeting``, in the order Zoom
    lists them. The target path only depends on the output directory, the
    normalized meeting time and the file type; nothing here touches disk.
    """
    folder = date_key(normalized_time)
    artifacts = []

    for recording in meeting.recording_files:
        file_extension, filename = format_filename(
            normalized_time, recording.file_type
        )
        artifacts.append(
            PlannedArtifact(
                date_key=folder,
                time_key=time_key(normalized_time),
                file_extension=file_extension,
                target_path=os.path.join(output_dir, folder, filename),
                source_url=recording.download_url,
            )
        )

    return artifacts
