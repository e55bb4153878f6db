"""Tests for the maturity-diagnostic CLI."""

import json

import pytest
import yaml
from click.testing import CliRunner

from maturity_diagnostic.cli import main
from maturity_diagnostic.questionnaire import get_default_questionnaire
from maturity_diagnostic.risk_classifier import DRIFT_RISK, ENTROPY_RISK


def _questionnaire_document() -> dict:
    """One context question and one behavioral question."""
    return {
        "operationalContext": {
            "questions": [
                {"id": "teamSize", "prompt": "Teams?", "options": [{"label": "Few", "score": 1}]},
            ],
        },
        "structuralMaturity": {
            "dimensions": ["Governance"],
            "behavioralQuestions": [
                {"id": "gov_1", "dimension": "Governance", "prompt": "Owned?"},
            ],
        },
    }


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Config that keeps state and history inside the test directory."""
    path = tmp_path / "diagnostic-config.yaml"
    path.write_text(yaml.safe_dump({
        "storage": {
            "state_path": str(tmp_path / "state.json"),
            "history_path": str(tmp_path / "reports.json"),
        },
    }))
    return path


@pytest.fixture
def complete_answers(tmp_path):
    """Answers file covering every bundled question at the middle levels."""
    questionnaire = get_default_questionnaire()
    path = tmp_path / "answers.json"
    path.write_text(json.dumps({
        "contextResponses": {q.id: 2 for q in questionnaire.operational_context.questions},
        "responses": {q.id: 2 for q in questionnaire.structural_maturity.behavioral_questions},
    }))
    return path


@pytest.fixture
def context_only_answers(tmp_path):
    path = tmp_path / "context.yaml"
    path.write_text(yaml.safe_dump({"contextResponses": {"teamSize": 4, "aiUsage": 4}}))
    return path


class TestQuestionsCommand:
    """Tests for 'maturity-diagnostic questions'."""

    def test_lists_bundled_questionnaire(self, runner):
        result = runner.invoke(main, ["questions"])

        assert result.exit_code == 0
        assert "Operational Context" in result.output
        assert "ID: teamSize" in result.output
        assert "ID: governance_ownership" in result.output

    def test_invalid_questionnaire(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("structuralMaturity: [unclosed")

        result = runner.invoke(main, ["questions", "-q", str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestScoreCommand:
    """Tests for 'maturity-diagnostic score'."""

    def test_formatted_output(self, runner, complete_answers):
        result = runner.invoke(main, ["score", "-a", str(complete_answers)])

        assert result.exit_code == 0
        assert "Results" in result.output
        assert "Stronger signals" in result.output
        assert "Emerging signals" in result.output
        assert "No strong gap signals were detected" in result.output

    def test_verbose_output(self, runner, complete_answers):
        result = runner.invoke(main, ["score", "-a", str(complete_answers), "-v"])

        assert result.exit_code == 0
        assert "Operational Pressure Breakdown" in result.output
        assert "Copyable summary" in result.output

    def test_json_output(self, runner, complete_answers):
        result = runner.invoke(main, ["score", "-a", str(complete_answers), "-j"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["SSI"] == pytest.approx(200 / 3)
        assert data["OPI"] == pytest.approx(100 / 3)
        assert data["adequacyGap"] == pytest.approx(100 / 3)
        assert data["riskFlags"] == []
        assert data["contextResponses"]["teamSize"] == 2

    def test_risks_are_shown(self, runner, context_only_answers):
        result = runner.invoke(main, ["score", "-a", str(context_only_answers), "-j"])

        assert result.exit_code == 0
        flags = json.loads(result.output)["riskFlags"]
        assert ENTROPY_RISK in flags
        assert DRIFT_RISK in flags

    def test_writes_export_file(self, runner, complete_answers, tmp_path):
        out = tmp_path / "report.json"
        result = runner.invoke(main, ["score", "-a", str(complete_answers), "-o", str(out)])

        assert result.exit_code == 0
        assert "SSI" in json.loads(out.read_text())

    def test_save_adds_to_history(self, runner, complete_answers, config_file, tmp_path):
        args = ["--config", str(config_file), "score", "-a", str(complete_answers), "--save"]
        runner.invoke(main, args)
        result = runner.invoke(main, args)

        assert result.exit_code == 0
        saved = json.loads((tmp_path / "reports.json").read_text())
        assert len(saved) == 1

    def test_unreadable_answers(self, runner, tmp_path):
        path = tmp_path / "answers.json"
        path.write_text("{broken")

        result = runner.invoke(main, ["score", "-a", str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestValidateCommand:
    """Tests for 'maturity-diagnostic validate'."""

    def test_complete_answers(self, runner, complete_answers):
        result = runner.invoke(main, ["validate", "-a", str(complete_answers)])

        assert result.exit_code == 0
        assert "All questions answered" in result.output

    def test_missing_answers(self, runner, context_only_answers):
        result = runner.invoke(main, ["validate", "-a", str(context_only_answers)])

        assert result.exit_code == 1
        assert "Please answer all context questions (3 left)." in result.output
        assert "Please answer all structural maturity questions (18 left)." in result.output
        assert "- productComplexity" in result.output

    def test_nothing_to_validate(self, runner):
        result = runner.invoke(main, ["validate"])

        assert result.exit_code == 0
        assert "Please specify --answers and/or --questionnaire" in result.output

    def test_valid_questionnaire(self, runner, tmp_path):
        path = tmp_path / "questionnaire.yaml"
        path.write_text(yaml.safe_dump(_questionnaire_document()))

        result = runner.invoke(main, ["validate", "-q", str(path)])

        assert result.exit_code == 0
        assert "Questionnaire valid" in result.output

    def test_questionnaire_issues_are_listed(self, runner, tmp_path):
        document = _questionnaire_document()
        document["structuralMaturity"]["dimensions"].append("Adoption")
        path = tmp_path / "questionnaire.yaml"
        path.write_text(yaml.safe_dump(document))

        result = runner.invoke(main, ["validate", "-q", str(path)])

        assert result.exit_code == 1
        assert "Questionnaire invalid" in result.output
        assert "Dimension 'Adoption' has no questions" in result.output

    def test_missing_questionnaire_file(self, runner, tmp_path):
        result = runner.invoke(main, ["validate", "-q", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Questionnaire invalid" in result.output

    def test_answers_against_custom_questionnaire(self, runner, tmp_path):
        questionnaire = tmp_path / "questionnaire.yaml"
        questionnaire.write_text(yaml.safe_dump(_questionnaire_document()))
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps({"contextResponses": {"teamSize": 2}, "responses": {"gov_1": 3}}))

        result = runner.invoke(main, ["validate", "-q", str(questionnaire), "-a", str(answers)])

        assert result.exit_code == 0
        assert "All questions answered" in result.output


class TestExportCommand:
    """Tests for 'maturity-diagnostic export'."""

    def test_export_to_directory(self, runner, complete_answers, tmp_path):
        out_dir = tmp_path / "exports"
        out_dir.mkdir()

        result = runner.invoke(main, ["export", "-a", str(complete_answers), "-o", str(out_dir)])

        assert result.exit_code == 0
        files = list(out_dir.glob("ds-maturity-report-*.json"))
        assert len(files) == 1
        data = json.loads(files[0].read_text())
        assert set(data) == {
            "timestamp", "contextResponses", "dimensionScores", "SSI", "OPI",
            "adequacyGap", "riskFlags", "guidanceTips",
        }


class TestRunCommand:
    """Tests for the interactive 'maturity-diagnostic run'."""

    CONTEXT_COUNT = 5
    MATURITY_COUNT = 18

    def test_full_run(self, runner, config_file, tmp_path):
        # highest pressure on every context question, lowest maturity everywhere
        answers = "4\n" * self.CONTEXT_COUNT + "1\n" * self.MATURITY_COUNT

        result = runner.invoke(main, ["--config", str(config_file), "run"], input=answers)

        assert result.exit_code == 0
        assert "Results" in result.output
        assert ENTROPY_RISK in result.output
        assert DRIFT_RISK in result.output

        state = json.loads((tmp_path / "state.json").read_text())
        assert state["currentStep"] == 3
        assert state["contextResponses"]["teamSize"] == 4
        assert set(state["responses"].values()) == {0}
        assert len(json.loads((tmp_path / "reports.json").read_text())) == 1

    def test_resumes_from_saved_state(self, runner, config_file, tmp_path):
        questionnaire = get_default_questionnaire()
        (tmp_path / "state.json").write_text(json.dumps({
            "currentStep": 2,
            "contextResponses": {q.id: 1 for q in questionnaire.operational_context.questions},
            "responses": {},
        }))

        result = runner.invoke(
            main, ["--config", str(config_file), "run"], input="4\n" * self.MATURITY_COUNT
        )

        assert result.exit_code == 0
        assert "Step 1/3" not in result.output
        state = json.loads((tmp_path / "state.json").read_text())
        assert set(state["responses"].values()) == {3}

    def test_interrupted_run_keeps_answers(self, runner, config_file, tmp_path):
        result = runner.invoke(main, ["--config", str(config_file), "run"], input="3\n3\n")

        assert result.exit_code == 0
        assert "Stopped" in result.output
        state = json.loads((tmp_path / "state.json").read_text())
        assert state["currentStep"] == 1
        assert state["contextResponses"] == {"teamSize": 3, "productComplexity": 3}
        assert not (tmp_path / "reports.json").exists()

    def test_reset_discards_answers(self, runner, config_file, tmp_path):
        (tmp_path / "state.json").write_text(json.dumps({
            "currentStep": 2,
            "contextResponses": {"teamSize": 4},
            "responses": {},
        }))

        runner.invoke(main, ["--config", str(config_file), "run", "--reset"], input="")

        state = json.loads((tmp_path / "state.json").read_text())
        assert state["contextResponses"] == {}


class TestHistoryCommand:
    """Tests for 'maturity-diagnostic history'."""

    def test_empty(self, runner, config_file):
        result = runner.invoke(main, ["--config", str(config_file), "history"])

        assert result.exit_code == 0
        assert "No saved report yet." in result.output

    def test_lists_saved_reports(self, runner, config_file, complete_answers):
        runner.invoke(main, ["--config", str(config_file), "score", "-a", str(complete_answers), "--save"])

        result = runner.invoke(main, ["--config", str(config_file), "history"])

        assert result.exit_code == 0
        assert "No saved report yet." not in result.output
        assert "Overbuilt" in result.output


class TestInitConfigCommand:
    """Tests for 'maturity-diagnostic init-config'."""

    def test_creates_file(self, runner, tmp_path):
        out = tmp_path / "config.yaml"

        result = runner.invoke(main, ["init-config", "-o", str(out)])

        assert result.exit_code == 0
        assert out.exists()
        assert yaml.safe_load(out.read_text())["history"]["max_saved_reports"] == 25

    def test_refuses_to_overwrite(self, runner, tmp_path):
        out = tmp_path / "config.yaml"
        out.write_text("# mine\n")

        result = runner.invoke(main, ["init-config", "-o", str(out)])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert out.read_text() == "# mine\n"

    def test_force_overwrites(self, runner, tmp_path):
        out = tmp_path / "config.yaml"
        out.write_text("# mine\n")

        result = runner.invoke(main, ["init-config", "-o", str(out), "--force"])

        assert result.exit_code == 0
        assert out.read_text().startswith("# Maturity Diagnostic Configuration")
