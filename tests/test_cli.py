import json
from pathlib import Path

from click.testing import CliRunner

from api_playground.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliConvert:
    def test_convert_prints_json(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", str(FIXTURES / "item.yaml")])

        assert result.exit_code == 0
        config = json.loads(result.output)
        assert config["Item"]["get"]["verb"] == "GET"
        assert config["Item"]["update"]["endpoint"] == "/items/{id}"

    def test_convert_directory_to_file(self, tmp_path):
        output_file = tmp_path / "out" / "tests.json"
        runner = CliRunner()
        result = runner.invoke(main, ["convert", str(FIXTURES), "-o", str(output_file)])

        assert result.exit_code == 0
        assert output_file.exists()
        config = json.loads(output_file.read_text(encoding="utf-8"))
        assert set(config) == {"Batch", "Item", "notes"}
        assert config["Batch"]["parent_group"] == "Item"
        assert "broken.yaml" in result.output

    def test_convert_unquoted_date_enum(self, tmp_path):
        spec = tmp_path / "dates.yaml"
        spec.write_text(
            "openapi: 3.0.0\n"
            "info:\n  title: Report API\n"
            "paths:\n"
            "  /reports:\n"
            "    get:\n"
            "      parameters:\n"
            "        - name: day\n"
            "          in: query\n"
            "          schema:\n"
            "            type: string\n"
            "            enum: [2024-01-01, 2024-01-02]\n"
        )
        runner = CliRunner()
        result = runner.invoke(main, ["convert", str(spec)])

        assert result.exit_code == 0
        config = json.loads(result.output)
        assert config["Report"]["get"]["parameters"]["query"]["day"]["options"] == ["2024-01-01", "2024-01-02"]

    def test_convert_only_bad_documents_fails(self):
        runner = CliRunner()
        result = runner.invoke(main, ["convert", str(FIXTURES / "broken.yaml")])

        assert result.exit_code == 1
        assert "No test configurations found" in result.output


class TestCliDocs:
    def test_docs_writes_markdown(self, tmp_path):
        output_file = tmp_path / "docs.md"
        runner = CliRunner()
        result = runner.invoke(main, ["docs", str(FIXTURES / "item.yaml"), "-o", str(output_file)])

        assert result.exit_code == 0
        assert "### POST /items" in output_file.read_text(encoding="utf-8")


class TestCliRequest:
    def test_get_request(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "request", str(FIXTURES / "item.yaml"), "Item", "get",
            "-p", "id=5",
        ])

        assert result.exit_code == 0
        assert "GET /api/items?id=5" in result.output
        assert '"success": true' in result.output

    def test_post_with_json_body(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "request", str(FIXTURES / "item.yaml"), "Item", "post",
            "--body", '{"number": "3001", "type": "PART", "weight": "1.5"}',
        ])

        assert result.exit_code == 0
        assert '"weight": 1.5' in result.output

    def test_array_body(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "request", str(FIXTURES / "batch.yaml"), "Batch", "create",
            "--body", '[{"number": "1"}, {"number": "2", "quantity": "3"}]',
        ])

        assert result.exit_code == 0
        assert '"quantity": 3' in result.output

    def test_failed_response_exits_nonzero(self):
        runner = CliRunner()
        result = runner.invoke(main, ["request", str(FIXTURES / "item.yaml"), "Item", "get"])

        assert result.exit_code == 1
        assert "MISSING_PARAMETER" in result.output

    def test_unknown_action(self):
        runner = CliRunner()
        result = runner.invoke(main, ["request", str(FIXTURES / "item.yaml"), "Item", "archive"])

        assert result.exit_code != 0
        assert "Item.archive" in result.output

    def test_bad_param_format(self):
        runner = CliRunner()
        result = runner.invoke(main, ["request", str(FIXTURES / "item.yaml"), "Item", "get", "-p", "id"])

        assert result.exit_code != 0
        assert "key=value" in result.output
