"""
Snippetbox: Pydantic Schemas
=============================

    - forms.py:   HTML form bindings and their validation rules
    - health.py:  JSON body of GET /health
"""
