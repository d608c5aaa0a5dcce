"""I/O operations — loading the raw export and writing JSON for the dashboard."""

import json
from pathlib import Path

import requests

from bzstats.constants import DATA_DIR, DATA_URL, S3_REGION
from bzstats.errors import LoadError


# ─── Loading ────────────────────────────────────────────────────

def _parse_payload(text, source):
    if not text or not text.strip():
        raise LoadError(f"No data received from {source}")
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON from {source}: {e}") from e
    if not document:
        raise LoadError(f"No data received from {source}")
    if not isinstance(document, dict):
        raise LoadError(f"Expected a JSON object from {source}, got {type(document).__name__}")
    return document


def fetch_http(url):
    """GET the export over HTTP(S). One attempt, no retry."""
    try:
        response = requests.get(url)
        response.raise_for_status()
    except requests.HTTPError as e:
        raise LoadError(f"HTTP error! status: {e.response.status_code}") from e
    except requests.RequestException as e:
        raise LoadError(f"Unable to reach {url}: {e}") from e
    return _parse_payload(response.text, url)


def fetch_s3(uri):
    """Read the export from s3://bucket/key."""
    import boto3
    from botocore.config import Config
    from botocore.exceptions import BotoCoreError, ClientError

    bucket, _, key = uri[len("s3://"):].partition("/")
    if not bucket or not key:
        raise LoadError(f"Malformed S3 URI: {uri}")

    config = Config(retries={"max_attempts": 1, "mode": "standard"})
    client = boto3.client("s3", region_name=S3_REGION, config=config)
    try:
        body = client.get_object(Bucket=bucket, Key=key)["Body"].read()
    except (BotoCoreError, ClientError) as e:
        raise LoadError(f"Unable to read {uri}: {e}") from e
    return _parse_payload(body.decode("utf-8"), uri)


def read_local(path):
    """Read the export from a file on disk."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise LoadError(f"Unable to read {path}: {e}") from e
    return _parse_payload(text, str(path))


def load_document(source=DATA_URL):
    """Load the raw export from a URL, an s3:// URI or a local path.

    Raises LoadError on any failure or an empty payload.
    """
    source = str(source)
    if source.startswith(("http://", "https://")):
        return fetch_http(source)
    if source.startswith("s3://"):
        return fetch_s3(source)
    return read_local(source)


# ─── JSON Writers ────────────────────────────────────────────────

def write_json(filename, data, compact=False, data_dir=DATA_DIR):
    """Write data to a JSON file in the data directory."""
    path = Path(data_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        if compact:
            json.dump(data, f, separators=(",", ":"), default=str)
        else:
            json.dump(data, f, indent=2, default=str)
    size_kb = path.stat().st_size / 1024
    print(f"  Wrote {path.name} ({size_kb:.0f} KB)")
    return path
