"""
Módulo Jenkins: manifiesto, catálogo de recursos (master y agente swarm),
recurso JenkinsSetting y wrapper de la CLI remota.
"""
