"""Tests for the s3-tools command-line interface."""

import boto3
from moto import mock_aws
from typer.testing import CliRunner

from s3_tools import __version__
from s3_tools.cli import app

BUCKET = "test-bucket"
CONNECTION_ARGS = [
    "--access-key-id",
    "test_key",
    "--secret-access-key",
    "test_secret",
    "--region",
    "us-east-1",
]

runner = CliRunner()


def _invoke(*args):
    return runner.invoke(app, [*CONNECTION_ARGS, *args])


def test_version():
    """Test --version prints the package version."""
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"s3-tools {__version__}" in result.output


@mock_aws
class TestCLI:
    """Test CLI commands against mocked S3."""

    def setup_method(self, method):
        """Set up test environment."""
        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name="us-east-1",
        )
        self.s3_client.create_bucket(Bucket=BUCKET)

    def test_upload_dir(self, sample_file_structure):
        """Test uploading a directory tree."""
        result = _invoke("upload-dir", str(sample_file_structure), f"s3://{BUCKET}/p/")

        assert result.exit_code == 0, result.output
        assert "Uploaded 2 objects" in result.output
        keys = [
            obj["Key"]
            for obj in self.s3_client.list_objects_v2(Bucket=BUCKET)["Contents"]
        ]
        assert sorted(keys) == ["p/a.txt", "p/sub/b.txt"]

    def test_upload_keeps_file_name(self, temp_dir):
        """Test a trailing '/' keeps the local file name."""
        source = temp_dir / "report.txt"
        source.write_text("quarterly")

        result = _invoke("upload", str(source), f"s3://{BUCKET}/docs/")

        assert result.exit_code == 0, result.output
        body = self.s3_client.get_object(Bucket=BUCKET, Key="docs/report.txt")["Body"]
        assert body.read() == b"quarterly"

    def test_download(self, temp_dir):
        """Test downloading into a new local directory."""
        self.s3_client.put_object(Bucket=BUCKET, Key="docs/report.txt", Body=b"hi")
        target = temp_dir / "out"

        result = _invoke("download", f"s3://{BUCKET}/docs/report.txt", str(target))

        assert result.exit_code == 0, result.output
        assert (target / "report.txt").read_bytes() == b"hi"

    def test_download_missing_object(self, temp_dir):
        """Test a missing object exits with an error."""
        result = _invoke("download", f"s3://{BUCKET}/missing.txt", str(temp_dir))

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_exists(self):
        """Test exit status reflects object existence."""
        self.s3_client.put_object(Bucket=BUCKET, Key="here.txt", Body=b"x")

        assert _invoke("exists", f"s3://{BUCKET}/here.txt").exit_code == 0
        assert _invoke("exists", f"s3://{BUCKET}/gone.txt").exit_code == 1

    def test_info(self):
        """Test metadata output."""
        self.s3_client.put_object(
            Bucket=BUCKET, Key="data.csv", Body=b"a,b\n", ContentType="text/csv"
        )

        result = _invoke("info", f"s3://{BUCKET}/data.csv")

        assert result.exit_code == 0, result.output
        assert "Size: 4 bytes" in result.output
        assert "Content type: text/csv" in result.output

    def test_ls(self):
        """Test listing keys with a limit."""
        for name in ("a", "b", "c"):
            self.s3_client.put_object(Bucket=BUCKET, Key=f"logs/{name}", Body=b"x")

        result = _invoke("ls", f"s3://{BUCKET}/logs/")
        limited = _invoke("ls", f"s3://{BUCKET}/logs/", "--max-items", "2")

        assert result.exit_code == 0, result.output
        assert "Found 3 objects" in result.output
        assert f"s3://{BUCKET}/logs/c" in result.output
        assert "Found 2 objects" in limited.output

    def test_invalid_path(self):
        """Test a path without s3:// is rejected."""
        result = _invoke("exists", "bucket/key")

        assert result.exit_code == 1
        assert "must start with 's3://'" in result.output
