"""
Unit tests for the ai-scripts command line
"""

import pytest

from aiscripts.cli.main import build_parser, main, model_banner
from aiscripts.llm.factory import ClientFactory, LLMConfig


class FakeGit:
    def __init__(self):
        self.committed = []

    def staged_diff(self):
        return "diff --git a/x.py b/x.py\n+x = 1"

    def staged_files(self):
        return []

    def commit(self, message):
        self.committed.append(message)
        return "ok"


@pytest.fixture
def fake_git(monkeypatch):
    git = FakeGit()
    monkeypatch.setattr("aiscripts.services.commit_message.GitRepository", lambda: git)
    return git


@pytest.fixture
def template(tmp_path):
    path = tmp_path / "commit-template.txt"
    path.write_text("Describe:\n{{CODE_DIFF}}\n{{CODE_CONTEXT}}", encoding="utf-8")
    return path


# ============================================================================
# Parser and banner
# ============================================================================


def test_parser_rejects_unknown_provider():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["provider-info", "--provider", "mistral"])


def test_parser_collects_repeated_providers():
    args = build_parser().parse_args(["providers", "--provider", "openai", "--provider", "local"])

    assert args.provider == ["openai", "local"]
    assert args.max_tokens == 200


@pytest.mark.parametrize("value", ["0", "-1", "many"])
def test_parser_rejects_invalid_max_tokens(value, capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["providers", "--max-tokens", value])

    assert "--max-tokens" in capsys.readouterr().err


@pytest.mark.parametrize(
    "config,provider,model,expected",
    [
        (LLMConfig(), None, "my-model", "Using specified model: my-model"),
        (LLMConfig(model="global-model"), None, None, "Using global model: global-model"),
        (LLMConfig(gemini_default_model="gemini-pro"), "gemini", None, "Using gemini default model: gemini-pro"),
        (LLMConfig(), None, None, "No model specified. Using provider default."),
    ],
)
def test_model_banner(config, provider, model, expected):
    lines = model_banner(ClientFactory(config), provider, model)

    assert lines[0] == f"Using provider: {provider or 'local'}"
    assert lines[1] == expected


# ============================================================================
# Commands
# ============================================================================


def test_provider_info_with_override(capsys):
    factory = ClientFactory(LLMConfig(openai_api_key="k"))

    exit_code = main(["provider-info", "--provider", "openai"], factory=factory)

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Overriding provider to: openai" in out
    assert "Client provider: OpenAI" in out


def test_provider_info_missing_credentials_exits_1(capsys):
    factory = ClientFactory(LLMConfig())

    exit_code = main(["provider-info", "--provider", "anthropic"], factory=factory)

    assert exit_code == 1
    assert "Anthropic API key is required for Anthropic provider" in capsys.readouterr().err


def test_providers_command_saves_report(http, tmp_path, capsys):
    recorder = http({"choices": [{"text": "Python is great."}]})
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    exit_code = main(
        ["providers", "--provider", "local", "--prompt", "hi", "--verbose", "--results-dir", str(tmp_path)],
        factory=factory,
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Success" in out
    assert "=== LOCAL (llama-3.2-3b-instruct) ===" in out
    assert "Results saved to" in out
    assert len(list(tmp_path.glob("llm-test-results-*.md"))) == 1
    assert recorder.body()["prompt"] == "hi"


def test_providers_command_reports_malformed_endpoint(http, capsys):
    recorder = http()
    factory = ClientFactory(LLMConfig(local_endpoint="http://[::1"), transport=recorder.transport)

    exit_code = main(["providers", "--provider", "local", "--prompt", "hi"], factory=factory)

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Failed" in out
    assert "Invalid API endpoint URL" in out
    assert recorder.calls == 0


def test_providers_command_reads_prompt_file(http, tmp_path, capsys):
    prompt_file = tmp_path / "prompt.txt"
    prompt_file.write_text("from a file", encoding="utf-8")
    recorder = http({"choices": [{"text": "ok"}]})
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    exit_code = main(["providers", "--provider", "local", "--prompt-file", str(prompt_file), "-q"], factory=factory)

    assert exit_code == 0
    assert recorder.body()["prompt"] == "from a file"


def test_gemini_models_command(http, capsys):
    recorder = http(
        {
            "models": [
                {
                    "name": "models/gemini-1.5-flash",
                    "displayName": "Gemini 1.5 Flash",
                    "supportedGenerationMethods": ["generateContent", "countTokens"],
                }
            ]
        }
    )
    factory = ClientFactory(LLMConfig(gemini_api_key="g"), transport=recorder.transport)

    exit_code = main(["gemini-models"], factory=factory)

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "- Name: models/gemini-1.5-flash" in out
    assert "GEMINI_DEFAULT_MODEL=gemini-1.5-flash" in out


def test_gemini_models_without_key_exits_1(http, capsys):
    recorder = http()
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    assert main(["gemini-models"], factory=factory) == 1
    assert recorder.calls == 0


def test_commit_missing_template(tmp_path, capsys):
    exit_code = main(["commit", str(tmp_path / "nope.txt")], factory=ClientFactory(LLMConfig()))

    assert exit_code == 1
    assert "Template file not found" in capsys.readouterr().err


def test_commit_with_yes_commits(http, template, fake_git, capsys):
    recorder = http({"choices": [{"text": "feat: set x"}]})
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)

    exit_code = main(["commit", str(template), "--yes"], factory=factory)

    assert exit_code == 0
    assert fake_git.committed == ["feat: set x"]
    assert "Commit successful." in capsys.readouterr().out


def test_commit_abort(http, template, fake_git, monkeypatch, capsys):
    recorder = http({"choices": [{"text": "feat: set x"}]})
    factory = ClientFactory(LLMConfig(), transport=recorder.transport)
    monkeypatch.setattr("aiscripts.cli.main.ask_question", lambda query: "a")

    exit_code = main(["commit", str(template)], factory=factory)

    assert exit_code == 0
    assert fake_git.committed == []
    assert "Commit aborted." in capsys.readouterr().out
