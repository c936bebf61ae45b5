"""Interface de linha de comando."""
