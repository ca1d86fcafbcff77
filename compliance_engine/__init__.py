"""
Motor de cumplimiento documental para subcontratistas.

Calcula validez, estado y requisitos de los documentos legales que un
subcontratista debe aportar en una obra.
"""

__version__ = "1.0.0"
