"""
render.py - Terminal Rendering
===============================
Turns the form state into the text printed by the command line tool.

What is shown:
--------------
- while loading : "Buscando..."
- on error      : a single alert line, e.g. "[!] CPF não encontrado. ..."
- on a match    : the "Dados do Aluno" panel with one labelled line per field
- otherwise     : the empty-state hint
"""

from .session import QuerySession


TITLE = "Consulta Acadêmica"
RESULT_TITLE = "Dados do Aluno"
EMPTY_STATE = "Nenhuma busca realizada. Digite um CPF acima para começar."
LOADING = "Buscando..."

# Shown in place of an empty RA
MISSING_RA = "Não informado"

RULE = "-" * 50


def render_record(record) -> str:
    """
    Render a Record as a labelled panel.

    Example:
        Dados do Aluno
        --------------------------------------------------
        Nome       : Jane Doe
        CPF        : 11122233344
        RA         : RA001
        ...
    """
    # Same order as the result panel: name first, then identifiers
    rows = [
        ("Nome", record.nome_aluno),
        ("CPF", record.cpf),
        ("RA", record.ra or MISSING_RA),
        ("Campus", record.campus),
        ("Disciplina", record.nome_disciplina),
        ("Horário", record.horario),
        ("Local", record.local),
    ]

    # Pad labels to the longest one so the values line up
    width = max(len(label) for label, _ in rows)

    lines = [RESULT_TITLE, RULE]
    lines += [f"{label.ljust(width)} : {value}" for label, value in rows]
    return "\n".join(lines)


def render_error(message: str) -> str:
    return f"[!] {message}"


def render_session(session: QuerySession) -> str:
    """Render whatever the form currently shows: result, error, or empty state."""
    if session.loading:
        return LOADING
    if session.error:
        return render_error(session.error)
    if session.result is not None:
        return render_record(session.result)
    return EMPTY_STATE
