"""Unit tests for answer sources"""

import io

import pytest
import yaml
from rich.console import Console

from astrokit.exceptions import ConfigError
from astrokit.prompts.graph import QUESTIONS
from astrokit.prompts.sources import FileAnswerSource, env_name, get_env_value, is_non_interactive

BY_NAME = {question.name: question for question in QUESTIONS}


@pytest.fixture
def quiet():
    return Console(file=io.StringIO())


class TestFileAnswerSource:
    """Test answers from a mapping with env fallback"""

    def test_answer_from_mapping(self, quiet):
        source = FileAnswerSource({"project_name": "blog-demo"}, console=quiet)

        assert source.ask(BY_NAME["project_name"]) == "blog-demo"

    def test_default_when_missing(self, quiet):
        source = FileAnswerSource({}, console=quiet)

        assert source.ask(BY_NAME["template"]) == "blog"
        assert source.ask(BY_NAME["use_tailwind"]) is True
        assert "(default)" in quiet.file.getvalue()

    def test_env_fallback(self, quiet, monkeypatch):
        monkeypatch.setenv("ASTROKIT_FRAMEWORK", "svelte")
        source = FileAnswerSource({}, console=quiet)

        assert source.ask(BY_NAME["framework"]) == "svelte"

    def test_mapping_beats_env(self, quiet, monkeypatch):
        monkeypatch.setenv("ASTROKIT_FRAMEWORK", "svelte")
        source = FileAnswerSource({"framework": "vue"}, console=quiet)

        assert source.ask(BY_NAME["framework"]) == "vue"

    @pytest.mark.parametrize("raw,expected", [("yes", True), ("false", False), ("1", True), (False, False)])
    def test_confirm_coercion(self, quiet, raw, expected):
        source = FileAnswerSource({"use_sanity": raw}, console=quiet)

        assert source.ask(BY_NAME["use_sanity"]) is expected

    def test_bad_boolean(self, quiet):
        source = FileAnswerSource({"use_sanity": "maybe"}, console=quiet)

        with pytest.raises(ConfigError):
            source.ask(BY_NAME["use_sanity"])

    def test_invalid_choice(self, quiet):
        source = FileAnswerSource({"deployment": "heroku"}, console=quiet)

        with pytest.raises(ConfigError) as exc_info:
            source.ask(BY_NAME["deployment"])

        assert exc_info.value.details["allowed"] == ["none", "nodejs", "netlify", "vercel"]

    def test_validator_applies(self, quiet):
        source = FileAnswerSource({"project_name": "_private"}, console=quiet)

        with pytest.raises(ConfigError) as exc_info:
            source.ask(BY_NAME["project_name"])

        assert "cannot start with . or _" in exc_info.value.message

    def test_confirmations(self, quiet, monkeypatch):
        source = FileAnswerSource({}, {"delete_existing": "yes"}, console=quiet)

        assert source.confirm("delete_existing") is True
        assert source.confirm("overwrite_backend") is False
        assert source.confirm("seed_data") is True

        monkeypatch.setenv("ASTROKIT_SEED_DATA", "no")
        assert source.confirm("seed_data") is False


class TestAnswersFile:
    """Test loading answers from YAML"""

    def test_from_file(self, tmp_path, quiet):
        path = tmp_path / "answers.yaml"
        path.write_text(yaml.safe_dump({
            "project_name": "shop",
            "use_medusa": True,
            "confirmations": {"seed_data": False},
        }))

        source = FileAnswerSource.from_file(path, quiet)

        assert source.answers == {"project_name": "shop", "use_medusa": True}
        assert source.confirm("seed_data") is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            FileAnswerSource.from_file(tmp_path / "missing.yaml")

        assert "not found" in exc_info.value.message

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "answers.yaml"
        path.write_text("project_name: [unclosed")

        with pytest.raises(ConfigError):
            FileAnswerSource.from_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "answers.yaml"
        path.write_text("- blog-demo\n")

        with pytest.raises(ConfigError) as exc_info:
            FileAnswerSource.from_file(path)

        assert exc_info.value.details == {"found": "list"}


class TestEnvironment:

    def test_env_name(self):
        assert env_name("project_name") == "ASTROKIT_PROJECT_NAME"

    def test_empty_env_is_unset(self, monkeypatch):
        monkeypatch.setenv("ASTROKIT_TEMPLATE", "")

        assert get_env_value("template") is None

    @pytest.mark.parametrize("value,expected", [("1", True), ("true", True), ("YES", True), ("0", False), ("", False)])
    def test_non_interactive(self, monkeypatch, value, expected):
        monkeypatch.setenv("ASTROKIT_NON_INTERACTIVE", value)

        assert is_non_interactive() is expected
