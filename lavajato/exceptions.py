"""
Erros de domínio do sistema.

Os serviços levantam estas exceções; o main.py traduz cada uma para a
resposta HTTP correspondente.
"""


class LavajatoError(Exception):
    """Base de todos os erros de domínio."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LavajatoError):
    """Entrada malformada ou faltando dado obrigatório."""

    status_code = 400


class NotFoundError(LavajatoError):
    """Entidade referenciada não existe."""

    status_code = 404

    def __init__(self, entity: str, entity_id=None):
        if entity_id is None:
            message = f"{entity} não encontrado(a)."
        else:
            message = f"{entity} não encontrado(a): {entity_id}"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class ConfigurationError(LavajatoError):
    """Cadastro necessário ausente (ex: serviços do programa de fidelidade)."""

    status_code = 409
