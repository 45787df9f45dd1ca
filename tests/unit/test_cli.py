"""Unit tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from kubereach.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("ports: ['TCP/6379']\n")
    return path


@pytest.fixture
def invoke(runner, config_file, stars_manifest):
    """Invoke a subcommand against the stars manifests."""

    def _invoke(*args: str):
        command, *rest = args
        return runner.invoke(cli, ["--config", str(config_file), command, "-f", str(stars_manifest), *rest])

    return _invoke


class TestCheckCommand:
    """Test the check command."""

    def test_allowed(self, invoke):
        """Test exit code 0 for allowed connections."""
        result = invoke("check", "stars/frontend", "stars/backend", "--port", "6379")

        assert result.exit_code == 0
        assert "ALLOW stars/frontend -> stars/backend TCP/6379" in result.output

    def test_denied(self, invoke):
        """Test exit code 1 for denied connections."""
        result = invoke("check", "stars/frontend", "stars/backend", "--port", "80")

        assert result.exit_code == 1
        assert "DENY stars/frontend -> stars/backend TCP/80" in result.output

    def test_explain(self, invoke):
        """Test the explanation lines."""
        result = invoke("check", "client/client", "stars/backend", "-p", "6379", "--explain")

        assert result.exit_code == 1
        assert "ingress: stars/backend is isolated and no rule matches" in result.output
        assert "egress: client/client is not isolated" in result.output

    def test_json(self, invoke):
        """Test JSON verdicts."""
        result = invoke("check", "stars/frontend", "stars/backend", "-p", "6379", "-o", "json")

        data = json.loads(result.output)
        assert result.exit_code == 0
        assert data["allowed"] is True
        assert data["ingress"]["policies"] == ["stars/backend-policy"]

    def test_direction(self, invoke):
        """Test egress-only evaluation."""
        result = invoke("check", "stars/frontend", "stars/backend", "-p", "80", "--direction", "egress")

        assert result.exit_code == 0

    def test_unknown_pod(self, invoke):
        """Test exit code 2 for unknown pods."""
        result = invoke("check", "stars/frontend", "stars/nope", "-p", "80")

        assert result.exit_code == 2
        assert "Error: pod 'stars/nope' not found" in result.output

    def test_invalid_manifest(self, runner, config_file, tmp_path):
        """Test exit code 2 for invalid manifests."""
        path = tmp_path / "bad.yaml"
        path.write_text("kind: NetworkPolicy\nmetadata: {name: p, namespace: missing}\n")

        result = runner.invoke(
            cli, ["--config", str(config_file), "check", "-f", str(path), "missing/a", "missing/b", "-p", "80"]
        )

        assert result.exit_code == 2
        assert "unknown namespace 'missing'" in result.output

    @pytest.mark.parametrize(
        "spec",
        [
            "ingress: [{ports: [80]}]",
            "ingress: [null]",
            "ingress: [{from: [role=frontend]}]",
            "ingress: [{ports: [{port: 80, endPort: x}]}]",
        ],
    )
    def test_malformed_manifest(self, runner, config_file, tmp_path, spec):
        """Test exit code 2 for wrongly shaped policies."""
        path = tmp_path / "bad.yaml"
        path.write_text(
            "kind: Namespace\nmetadata: {name: app}\n---\n"
            f"kind: NetworkPolicy\nmetadata: {{name: p, namespace: app}}\nspec: {{{spec}}}\n"
        )

        result = runner.invoke(cli, ["--config", str(config_file), "list", "-f", str(path)])

        assert result.exit_code == 2
        assert "Error: app/p: spec.ingress[0]" in result.output

    def test_invalid_config(self, runner, tmp_path, stars_manifest):
        """Test exit code 2 for invalid configuration."""
        path = tmp_path / "config.yaml"
        path.write_text("colour: blue\n")

        result = runner.invoke(cli, ["--config", str(path), "list", "-f", str(stars_manifest)])

        assert result.exit_code == 2
        assert "unknown setting(s): colour" in result.output


class TestMatrixCommand:
    """Test the matrix command."""

    def test_csv(self, invoke):
        """Test CSV output for one namespace using configured ports."""
        result = invoke("matrix", "-n", "stars", "-o", "csv")

        lines = result.output.splitlines()
        assert result.exit_code == 0
        assert lines[0] == "source,destination,protocol,port,allowed"
        assert len(lines) == 1 + 4 * 2 - 2
        assert "stars/frontend,stars/backend,TCP,6379,allow" in lines
        assert "client/client,stars/backend,TCP,6379,deny" in lines

    def test_json_ports(self, invoke):
        """Test explicit ports and JSON output."""
        result = invoke("matrix", "-p", "TCP/80", "-p", "udp/53", "-o", "json")

        document = json.loads(result.output)
        assert document["ports"] == ["TCP/80", "UDP/53"]
        assert document["summary"]["total"] == 4 * 3 * 2

    def test_table(self, invoke):
        """Test the table summary."""
        result = invoke("matrix", "-n", "stars")

        assert result.exit_code == 0
        assert "3 allowed, 3 denied" in result.output

    def test_output_file(self, invoke, tmp_path):
        """Test exporting to a file."""
        path = tmp_path / "matrix.yaml"

        result = invoke("matrix", "-o", "yaml", "--output-file", str(path))

        assert result.exit_code == 0
        assert "mode: ingress" in path.read_text()

    def test_output_file_requires_export_format(self, invoke, tmp_path):
        """Test that tables cannot be written to files."""
        result = invoke("matrix", "--output-file", str(tmp_path / "matrix.txt"))

        assert result.exit_code == 2

    def test_invalid_port(self, invoke):
        """Test rejected port specs."""
        result = invoke("matrix", "-p", "ICMP/1")

        assert result.exit_code == 2
        assert "Unsupported protocol: ICMP" in result.output


class TestListAndDescribe:
    """Test the list and describe commands."""

    def test_list_json(self, invoke):
        """Test listing policies as JSON."""
        result = invoke("list", "-n", "stars", "-o", "json")

        policies = {p["name"]: p for p in json.loads(result.output)}
        assert result.exit_code == 0
        assert set(policies) == {"default-deny", "allow-ui", "backend-policy", "frontend-policy"}
        assert policies["default-deny"]["default_deny"] is True
        assert policies["backend-policy"]["ports"] == ["TCP/6379"]
        assert policies["frontend-policy"]["pod_selector"] == "role=frontend"

    def test_list_table(self, invoke):
        """Test listing policies as a table."""
        result = invoke("list")

        assert result.exit_code == 0
        assert "backend-policy" in result.output

    def test_describe(self, invoke):
        """Test describing a pod."""
        result = invoke("describe", "stars/backend")

        assert result.exit_code == 0
        assert "isolated" in result.output
        assert "TCP/6379" in result.output
        assert "stars/frontend" in result.output

    def test_describe_unknown_pod(self, invoke):
        """Test describing a missing pod."""
        result = invoke("describe", "stars/nope")

        assert result.exit_code == 2
