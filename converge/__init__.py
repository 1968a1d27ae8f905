"""
converge - motor mínimo de convergencia de estado deseado.

Recursos declarativos -> grafo de dependencias -> orden topológico ->
diff/aplicación por recurso -> propagación de notificaciones -> reporte.
"""

__version__ = "1.0.0"
