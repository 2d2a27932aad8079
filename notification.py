import os
import smtplib
import sys as system
from datetime import date
from email.message import EmailMessage
from enum import Enum

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from console import Color
from fetcher_errors import NotifyError


class DeliveryMode(Enum):
    # recordings are downloaded and the summary lists local paths
    LOCAL = "local"
    # nothing is downloaded; the summary lists the Zoom download URLs
    REMOTE = "remote"


def format_line(artifact, config, mode):
    if mode == DeliveryMode.REMOTE:
        return f"{artifact.date_key}/{artifact.filename}: {artifact.source_url}"
    return os.path.join(config.output_dir, artifact.date_key, artifact.filename)


def compose(manifest, config, mode, today=None):
    """Build the (subject, body) of the summary email for ``manifest``."""
    today = today or date.today()
    subject = f"{today.strftime('%Y-%m-%d')}: new Zoom recordings"

    body = "New Zoom recordings are available:\n\n"
    for artifact in manifest:
        body += f"{format_line(artifact, config, mode)}\n"

    return subject, body


class SmtpNotifier:
    """Hands the message to the local mail transfer agent."""

    def __init__(self, sender, host="localhost"):
        self.sender = sender
        self.host = host

    def send(self, recipient, subject, body):
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.host) as smtp:
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifyError(f"couldn't send email to {recipient}: {e}") from e


class SesNotifier:
    """Sends the message through Amazon SES."""

    def __init__(self, sender, ses_client=None):
        self.sender = sender
        self.ses = ses_client

    def send(self, recipient, subject, body):
        try:
            if self.ses is None:
                self.ses = boto3.client("ses")
            self.ses.send_email(
                Source=self.sender,
                Destination={"ToAddresses": [recipient]},
                Message={
                    "Subject": {"Data": subject},
                    "Body": {"Text": {"Data": body}},
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise NotifyError(f"couldn't send email to {recipient}: {e}") from e


def notify_new_recordings(manifest, config, mode, notifier, today=None):
    """
    Email the summary for ``manifest`` if there is anything new and someone
    to tell. Returns True if a message went out. Send failures are reported
    and otherwise ignored: the recordings are already on disk by now.
    """
    if not manifest or not config.notify:
        return False

    subject, body = compose(manifest, config, mode, today)
    try:
        notifier.send(config.notify, subject, body)
    except NotifyError as e:
        print(f"{Color.RED}### {e}{Color.END}", file=system.stderr)
        return False

    print(f"{Color.GREEN}Notified {config.notify} of {len(manifest)} new recording(s){Color.END}")
    return True
