"""WSGI entrypoint for deploying the ContaCalc backend behind Passenger."""

from contacalc.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
