"""Utilidades compartidas de la CLI: comandos, logging, rutas, doctor y presentación."""
