"""
consulta - Consulta Acadêmica por CPF
======================================

Looks up a student's class record (campus, RA, course, schedule, room) by CPF.

Modules:
--------
- cpf.py          : CPF normalization, validation and input mask
- matcher.py      : Record matcher over exported sheet text
- loader.py       : Local spreadsheet export loading (CSV/TSV/Excel)
- config.py       : Configuration management (loads settings from .env)
- http_client.py  : HTTP client for the sheet export and the backend API
- sources.py      : Interchangeable record sources (sheet, API, file)
- session.py      : Form state and query sequencing
- render.py       : Terminal rendering of results
- run_consulta.py : Main entry point

Usage:
------
    python -m consulta.run_consulta --cpf 111.222.333-44
    python -m consulta.run_consulta --source api
    python -m consulta.run_consulta --file turma.xlsx

Data sources:
-------------
1. sheet : GET the published Google Sheets CSV export and scan it
2. api   : POST {API_BASE}/consulta with {"cpf": "<11 digits>"}
3. file  : Scan a locally downloaded export
"""
