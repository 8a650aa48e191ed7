from .usuario import Usuario, TipoUsuario
from .perfil_alumno import PerfilAlumno
from .perfil_instructor import PerfilInstructor
from .taller import Taller
from .inscripcion import Inscripcion, EstadoInscripcion
from .aviso import Aviso
from .calendario import FechaImportante, TipoEvento
from .informacion_emergencia import InformacionEmergencia

__all__ = [
    "Usuario", "TipoUsuario", "PerfilAlumno", "PerfilInstructor", "Taller",
    "Inscripcion", "EstadoInscripcion", "Aviso", "FechaImportante", "TipoEvento",
    "InformacionEmergencia",
]
