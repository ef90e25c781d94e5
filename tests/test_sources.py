import json
from unittest import mock

import pytest
import requests

from consulta.config import Settings
from consulta.http_client import HttpClient
from consulta.matcher import NOT_FOUND, Record
from consulta.sources import (
    NOT_FOUND_MESSAGE,
    TRANSPORT_ERROR_MESSAGE,
    ApiSource,
    FileSource,
    NotFoundResult,
    SheetSource,
    SourceError,
    build_source,
)


SHEET_URL = "https://sheet.example.com/pub?output=csv"
API_BASE = "https://api.example.com"

SHEET = (
    "cpf,campus,ra,nome_aluno,nome_disciplina,horario,local\n"
    "11122233344,Campus A,RA001,Jane Doe,Algorithms,Mon 10:00,Room 5\n"
)

JANE = {
    "cpf": "11122233344",
    "campus": "Campus A",
    "ra": "RA001",
    "nome_aluno": "Jane Doe",
    "nome_disciplina": "Algorithms",
    "horario": "Mon 10:00",
    "local": "Room 5",
}


def make_response(status: int, body: str, content_type: str = "application/json"):
    r = requests.Response()
    r.status_code = status
    r._content = body.encode("utf-8")
    r.headers["content-type"] = content_type
    r.encoding = "utf-8"
    return r


@pytest.fixture
def client():
    c = HttpClient(Settings(source="api", api_base=API_BASE, timeout_sec=5))
    yield c
    c.close()


class TestSheetSource:
    """Published-sheet export over GET."""

    def test_found(self, client):
        with mock.patch.object(client.s, "get", return_value=make_response(200, SHEET, "text/csv")) as get:
            result = SheetSource(client, SHEET_URL).lookup("11122233344")

        assert result == Record(**JANE)
        get.assert_called_once_with(SHEET_URL, timeout=5)

    def test_not_found(self, client):
        with mock.patch.object(client.s, "get", return_value=make_response(200, SHEET, "text/csv")):
            assert SheetSource(client, SHEET_URL).lookup("99999999999") is NOT_FOUND

    def test_content_type_ignored(self, client):
        with mock.patch.object(client.s, "get", return_value=make_response(200, SHEET, "text/html")):
            assert SheetSource(client, SHEET_URL).lookup("11122233344").campus == "Campus A"

    def test_server_error(self, client):
        with mock.patch.object(client.s, "get", return_value=make_response(500, "oops", "text/plain")):
            with pytest.raises(SourceError) as exc:
                SheetSource(client, SHEET_URL).lookup("11122233344")
        assert exc.value.message == TRANSPORT_ERROR_MESSAGE
        assert exc.value.status == 500

    def test_network_error(self, client):
        with mock.patch.object(client.s, "get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(SourceError) as exc:
                SheetSource(client, SHEET_URL).lookup("11122233344")
        assert exc.value.message == TRANSPORT_ERROR_MESSAGE
        assert exc.value.status == 0


class TestApiSource:
    """Backend API over POST {API_BASE}/consulta."""

    def test_found(self, client):
        with mock.patch.object(client.s, "post", return_value=make_response(200, json.dumps(JANE))) as post:
            result = ApiSource(client).lookup("11122233344")

        assert result == Record(**JANE)
        args, kwargs = post.call_args
        assert args[0] == f"{API_BASE}/consulta"
        assert kwargs["json"] == {"cpf": "11122233344"}

    def test_missing_fields_are_empty(self, client):
        body = json.dumps({"cpf": "11122233344", "nome_aluno": " Jane Doe ", "ra": None})
        with mock.patch.object(client.s, "post", return_value=make_response(200, body)):
            result = ApiSource(client).lookup("11122233344")
        assert result.nome_aluno == "Jane Doe"
        assert result.ra == ""
        assert result.local == ""

    def test_not_found_carries_server_message(self, client):
        body = json.dumps({"error": "not found"})
        with mock.patch.object(client.s, "post", return_value=make_response(404, body)):
            result = ApiSource(client).lookup("99999999999")

        assert isinstance(result, NotFoundResult)
        assert not result
        assert result.message == "not found"

    def test_not_found_without_message(self, client):
        with mock.patch.object(client.s, "post", return_value=make_response(404, "", "text/plain")):
            result = ApiSource(client).lookup("99999999999")
        assert result.message == NOT_FOUND_MESSAGE

    def test_server_message_surfaced_verbatim(self, client):
        body = json.dumps({"error": "Planilha indisponível"})
        with mock.patch.object(client.s, "post", return_value=make_response(503, body)):
            with pytest.raises(SourceError) as exc:
                ApiSource(client).lookup("11122233344")
        assert exc.value.message == "Planilha indisponível"
        assert exc.value.status == 503

    def test_error_without_json_body(self, client):
        with mock.patch.object(client.s, "post", return_value=make_response(500, "<html>", "text/html")):
            with pytest.raises(SourceError) as exc:
                ApiSource(client).lookup("11122233344")
        assert exc.value.message == TRANSPORT_ERROR_MESSAGE

    def test_malformed_json(self, client):
        with mock.patch.object(client.s, "post", return_value=make_response(200, "{not json")):
            with pytest.raises(SourceError) as exc:
                ApiSource(client).lookup("11122233344")
        assert exc.value.message == TRANSPORT_ERROR_MESSAGE

    def test_json_that_is_not_an_object(self, client):
        with mock.patch.object(client.s, "post", return_value=make_response(200, "[]")):
            with pytest.raises(SourceError):
                ApiSource(client).lookup("11122233344")

    def test_network_error(self, client):
        with mock.patch.object(client.s, "post", side_effect=requests.Timeout("slow")):
            with pytest.raises(SourceError) as exc:
                ApiSource(client).lookup("11122233344")
        assert exc.value.message == TRANSPORT_ERROR_MESSAGE

    def test_no_retry(self, client):
        with mock.patch.object(client.s, "post", return_value=make_response(503, "{}")) as post:
            with pytest.raises(SourceError):
                ApiSource(client).lookup("11122233344")
        assert post.call_count == 1


class TestFileSource:
    """Local export."""

    def test_found(self, tmp_path):
        path = tmp_path / "turma.csv"
        path.write_text(SHEET, encoding="utf-8")
        assert FileSource(str(path)).lookup("11122233344") == Record(**JANE)

    def test_missing_file_is_source_error(self, tmp_path):
        with pytest.raises(SourceError) as exc:
            FileSource(str(tmp_path / "nope.csv")).lookup("11122233344")
        assert exc.value.message == TRANSPORT_ERROR_MESSAGE

    def test_xls_file_is_source_error(self, tmp_path):
        path = tmp_path / "turma.xls"
        path.write_bytes(b"\xd0\xcf\x11\xe0")
        with pytest.raises(SourceError):
            FileSource(str(path)).lookup("11122233344")


class TestBuildSource:

    def test_sheet(self, client):
        settings = Settings(source="sheet", sheet_url=SHEET_URL)
        source = build_source(settings, client)
        assert isinstance(source, SheetSource)
        assert source.url == SHEET_URL

    def test_api(self, client):
        assert isinstance(build_source(Settings(source="api", api_base=API_BASE), client), ApiSource)

    def test_file_needs_no_client(self):
        source = build_source(Settings(source="file", file_path="turma.csv"))
        assert isinstance(source, FileSource)

    def test_http_source_without_client(self):
        with pytest.raises(RuntimeError):
            build_source(Settings(source="sheet"))
