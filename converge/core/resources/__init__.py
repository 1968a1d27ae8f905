"""
Resources: declaraciones tipadas de estado deseado del host.

Instalar (Package), cuentas (Group, User), configurar (File, Download) y
supervisar (Service) son tipos separados que el grafo compone.
"""

from converge.core.resources.accounts import Group, User
from converge.core.resources.base import Resource, make_id, parse_ref, ref_id
from converge.core.resources.files import Download, File
from converge.core.resources.package import Package
from converge.core.resources.service import Service

__all__ = [
    "Download",
    "File",
    "Group",
    "Package",
    "Resource",
    "Service",
    "User",
    "make_id",
    "parse_ref",
    "ref_id",
]
