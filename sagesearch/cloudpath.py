"""Paths that name either a local file or an object in S3, with transparent gzip."""

from __future__ import annotations

import datetime
import gzip
import hashlib
import hmac
import io
import os
import re
import urllib.error
import urllib.parse
import urllib.request
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional, TypeVar, Union

PART_SIZE = 256 * 1024 * 1024

T = TypeVar("T")

_URI = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*)://([^/?#]*)([^?#]*)")
_UNRESERVED = "-_.~"


class CloudPathError(Exception):
    """Raised when a cloud path cannot be read or written."""


class InvalidUriError(CloudPathError):
    """Raised for URIs that do not name a usable location."""

    def __init__(self, message: str = "invalid uri") -> None:
        super().__init__(message)


def _quote(text: str, safe: str = _UNRESERVED) -> str:
    return urllib.parse.quote(text, safe=safe)


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


@dataclass(frozen=True)
class _S3Client:
    access_key_id: str
    secret_access_key: str
    session_token: Optional[str]
    region: str
    endpoint: Optional[str]

    @classmethod
    def from_env(cls) -> _S3Client:
        access_key_id = os.environ.get("AWS_ACCESS_KEY_ID")
        secret_access_key = os.environ.get("AWS_SECRET_ACCESS_KEY")
        if not access_key_id or not secret_access_key:
            raise CloudPathError("s3 error: no credentials found in the environment")
        region = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or "us-east-1"
        endpoint = os.environ.get("AWS_ENDPOINT_URL_S3") or os.environ.get("AWS_ENDPOINT_URL")
        return cls(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=os.environ.get("AWS_SESSION_TOKEN") or None,
            region=region,
            endpoint=endpoint,
        )

    def _location(self, bucket: str, key: str) -> tuple[str, str, str]:
        encoded_key = _quote(key, safe="/" + _UNRESERVED)
        if self.endpoint:
            parsed = urllib.parse.urlsplit(self.endpoint)
            host = parsed.netloc
            canonical_uri = f"{parsed.path.rstrip('/')}/{_quote(bucket)}/{encoded_key}"
            return f"{parsed.scheme}://{host}{canonical_uri}", host, canonical_uri
        host = f"{bucket}.s3.{self.region}.amazonaws.com"
        canonical_uri = f"/{encoded_key}"
        return f"https://{host}{canonical_uri}", host, canonical_uri

    def _send(
        self,
        method: str,
        bucket: str,
        key: str,
        query: list[tuple[str, str]],
        body: bytes = b"",
    ) -> tuple[Any, bytes]:
        url, host, canonical_uri = self._location(bucket, key)
        canonical_query = "&".join(f"{_quote(k)}={_quote(v)}" for k, v in sorted(query))

        now = datetime.datetime.now(datetime.timezone.utc)
        amz_date = now.strftime("%Y%m%dT%H%M%SZ")
        datestamp = now.strftime("%Y%m%d")
        payload_hash = hashlib.sha256(body).hexdigest()

        headers = {
            "host": host,
            "x-amz-content-sha256": payload_hash,
            "x-amz-date": amz_date,
        }
        if self.session_token:
            headers["x-amz-security-token"] = self.session_token

        signed_headers = ";".join(sorted(headers))
        canonical_headers = "".join(f"{name}:{headers[name].strip()}\n" for name in sorted(headers))
        canonical_request = "\n".join(
            [method, canonical_uri, canonical_query, canonical_headers, signed_headers, payload_hash]
        )
        scope = f"{datestamp}/{self.region}/s3/aws4_request"
        string_to_sign = "\n".join(
            [
                "AWS4-HMAC-SHA256",
                amz_date,
                scope,
                hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
            ]
        )
        signing_key = _hmac(("AWS4" + self.secret_access_key).encode("utf-8"), datestamp)
        for part in (self.region, "s3", "aws4_request"):
            signing_key = _hmac(signing_key, part)
        signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

        headers["Authorization"] = (
            f"AWS4-HMAC-SHA256 Credential={self.access_key_id}/{scope}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )
        if canonical_query:
            url = f"{url}?{canonical_query}"

        request = urllib.request.Request(
            url,
            data=body if method in ("PUT", "POST") else None,
            headers=headers,
            method=method,
        )
        try:
            with urllib.request.urlopen(request) as response:
                return response.headers, response.read()
        except urllib.error.HTTPError as err:
            detail = err.read().decode("utf-8", "replace")
            raise CloudPathError(
                f"s3 error: {method} s3://{bucket}/{key} failed with status {err.code}: {detail}"
            ) from err
        except urllib.error.URLError as err:
            raise CloudPathError(f"s3 error: {err.reason}") from err

    def get_object(self, bucket: str, key: str) -> bytes:
        _, body = self._send("GET", bucket, key, [])
        return body

    def multipart_upload(self, bucket: str, key: str, data: bytes) -> None:
        """Upload in 256 MB parts, so objects beyond the single-PUT limit work."""
        _, body = self._send("POST", bucket, key, [("uploads", "")])
        upload_id = _find_text(body, "UploadId")
        if not upload_id:
            raise CloudPathError("s3 error: S3 CreateMultipartUpload did not return upload id!")

        parts: list[tuple[int, str]] = []
        for number, start in enumerate(range(0, len(data), PART_SIZE), start=1):
            headers, _ = self._send(
                "PUT",
                bucket,
                key,
                [("partNumber", str(number)), ("uploadId", upload_id)],
                data[start:start + PART_SIZE],
            )
            parts.append((number, headers.get("ETag") or ""))

        root = ET.Element("CompleteMultipartUpload")
        for number, etag in parts:
            part = ET.SubElement(root, "Part")
            ET.SubElement(part, "PartNumber").text = str(number)
            ET.SubElement(part, "ETag").text = etag
        self._send("POST", bucket, key, [("uploadId", upload_id)], ET.tostring(root))


def _find_text(document: bytes, tag: str) -> Optional[str]:
    try:
        root = ET.fromstring(document)
    except ET.ParseError as err:
        raise CloudPathError(f"s3 error: unreadable response: {err}") from err
    for element in root.iter():
        if element.tag == tag or element.tag.endswith("}" + tag):
            return element.text
    return None


@dataclass
class S3Path:
    """An object key inside an S3 bucket."""

    bucket: str
    key: str = ""

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    def push(self, name: str) -> None:
        """Append ``name`` to the key, using ``/`` as the delimiter."""
        if self.key:
            self.key += "/"
        self.key += name

    def filename(self) -> Optional[str]:
        """The last ``/``-separated component of the key."""
        return self.key.split("/")[-1]

    def mkdir(self) -> None:
        """S3 has no directories, so there is nothing to create."""
        return None

    def _is_gzip(self) -> bool:
        return self.key.endswith(("gz", "gzip"))

    def read(self) -> BinaryIO:
        """Fetch the object and return a binary stream, decompressed if gzipped."""
        stream = io.BytesIO(_S3Client.from_env().get_object(self.bucket, self.key))
        if self._is_gzip():
            return gzip.GzipFile(fileobj=stream, mode="rb")
        return stream

    def write_bytes(self, data: bytes) -> None:
        """Upload ``data``, gzip-compressing it when the key looks gzipped."""
        payload = gzip.compress(bytes(data)) if self._is_gzip() else bytes(data)
        _S3Client.from_env().multipart_upload(self.bucket, self.key, payload)


@dataclass
class LocalPath:
    """A path on the local file system."""

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def __str__(self) -> str:
        return str(self.path)

    def push(self, name: str) -> None:
        """Join ``name`` onto the path."""
        self.path = self.path / name

    def filename(self) -> Optional[str]:
        """The final path component, or ``None`` if there is none."""
        name = self.path.name
        if name in ("", ".."):
            return None
        return name

    def mkdir(self) -> None:
        """Create the directory and any missing parents."""
        self.path.mkdir(parents=True, exist_ok=True)

    def _is_gzip(self) -> bool:
        return self.path.suffix.lower() in (".gz", ".gzip")

    def read(self) -> BinaryIO:
        """Open the file for binary reading, decompressing if gzipped."""
        if self._is_gzip():
            return gzip.open(self.path, "rb")
        return open(self.path, "rb")

    def write_bytes(self, data: bytes) -> None:
        """Write ``data`` to the file, gzip-compressing it when the name looks gzipped."""
        payload = gzip.compress(bytes(data)) if self._is_gzip() else bytes(data)
        self.path.write_bytes(payload)


CloudPath = Union[S3Path, LocalPath]


def parse_cloud_path(text: str) -> CloudPath:
    """Parse ``s3://bucket/key`` into an :class:`S3Path`, anything schemeless into a :class:`LocalPath`.

    Other schemes, and S3 URIs without a bucket, raise :class:`InvalidUriError`.
    """
    match = _URI.match(text)
    if match is None:
        return LocalPath(Path(text))
    scheme, authority, path = match.groups()
    if scheme != "s3" or not authority:
        raise InvalidUriError()
    key = path[1:] if path.startswith("/") else ""
    return S3Path(bucket=authority, key=key)


def read_and_execute(path: Union[str, CloudPath], func: Callable[[BinaryIO], T]) -> T:
    """Open ``path`` for reading and return ``func`` applied to the stream."""
    location = parse_cloud_path(path) if isinstance(path, str) else path
    if isinstance(location, S3Path) and not location.key:
        raise InvalidUriError()
    with location.read() as stream:
        return func(stream)