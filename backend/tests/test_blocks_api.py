"""
Tests for the block palette and transpile endpoints.
"""

from learnspace.core.config import settings

API = settings.API_V1_STR


class TestTemplates:

    def test_python_palette(self, client):
        response = client.get(f"{API}/blocks/templates", params={"language": "python"})
        assert response.status_code == 200
        log = response.json()[0]
        assert log == {"id": "log", "label": "Print", "code": "print(%text%)", "params": ["text"]}

    def test_unknown_language_gets_javascript(self, client):
        templates = client.get(f"{API}/blocks/templates", params={"language": "cobol"}).json()
        assert templates[0]["code"] == "console.log(%text%);"


class TestTranspile:

    def test_transpile(self, client):
        response = client.post(f"{API}/blocks/transpile", json={
            "language": "javascript",
            "blocks": [
                {"type": "var", "template": "let %var% = %value%;", "params": {"var": "n", "value": "3"}},
                {"type": "log", "template": "console.log(%text%);", "params": {"text": "hello world"}},
                {"type": "log", "template": "console.log(%text%);", "params": {}},
            ],
        })
        assert response.status_code == 200
        assert response.json() == {"code": 'let n = 3;\nconsole.log("hello world");\nconsole.log("");'}

    def test_empty_program(self, client):
        assert client.post(f"{API}/blocks/transpile", json={"blocks": []}).json() == {"code": ""}

    def test_unknown_param(self, client):
        response = client.post(f"{API}/blocks/transpile", json={
            "blocks": [{"type": "log", "template": "console.log(%text%);", "params": {"msg": "x"}}],
        })
        assert response.status_code == 400
        assert "msg" in response.json()["detail"]

    def test_palette_blocks_use_requested_language(self, client):
        blocks = [
            {"type": "var", "params": {"var": "n", "value": "2"}},
            {"type": "log", "params": {"text": "n"}},
        ]
        python = client.post(f"{API}/blocks/transpile", json={"language": "python", "blocks": blocks})
        javascript = client.post(f"{API}/blocks/transpile", json={"language": "javascript", "blocks": blocks})

        assert python.json() == {"code": 'n = 2\nprint("n")'}
        assert javascript.json() == {"code": 'let n = 2;\nconsole.log("n");'}

    def test_unknown_palette_block(self, client):
        response = client.post(f"{API}/blocks/transpile", json={
            "language": "python",
            "blocks": [{"type": "while", "params": {}}],
        })
        assert response.status_code == 400
        assert "while" in response.json()["detail"]

    def test_palette_block_with_unknown_param(self, client):
        response = client.post(f"{API}/blocks/transpile", json={
            "language": "python",
            "blocks": [{"type": "log", "params": {"msg": "x"}}],
        })
        assert response.status_code == 400
        assert "msg" in response.json()["detail"]
