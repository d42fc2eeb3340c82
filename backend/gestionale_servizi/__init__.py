"""
Gestionale Servizi - Backend
Progetto: Gestionale Servizi (Servizi di Ingegneria e Preventivi)

Anagrafica aziende, servizi ART e preventivi esposti come API REST.
"""

__version__ = "1.0.0"
