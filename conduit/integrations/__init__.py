"""
Integrations: normalizers and service layers for external APIs.

base.py re-tags transport outcomes into the error taxonomy; each
subpackage (tasks/) maps one external API into internal records.
"""
