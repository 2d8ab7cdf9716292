"""
Condo Sync - Error Taxonomy
Erros de negócio e de backend, com mensagens amigáveis para o usuário
"""
import enum
from typing import Optional


class Reason(str, enum.Enum):
    """Motivo específico de uma rejeição"""
    INVALID_CPF = "InvalidCpf"
    MISSING_FIELD = "MissingField"
    INVALID_CHOICE = "InvalidChoice"
    INVALID_PERIOD = "InvalidPeriod"
    DUPLICATE_CPF = "DuplicateCpf"
    DUPLICATE_USERNAME = "DuplicateUsername"
    DUPLICATE_HOUSE = "DuplicateHouse"
    AREA_TAKEN = "AreaTaken"
    DUPLICATE_VOTE = "DuplicateVote"
    CROSS_EXCLUSIVITY = "CrossExclusivity"
    PAST_DATE = "PastDate"
    LEAD_TIME_EXCEEDED = "LeadTimeExceeded"
    FORBIDDEN = "Forbidden"
    EDIT_WINDOW_CLOSED = "EditWindowClosed"
    VOTING_NOT_ACTIVE = "VotingNotActive"
    NOT_FOUND = "NotFound"
    AUTH_FAILED = "AuthFailed"
    STORE_FAILURE = "StoreFailure"
    AUTH_ACCOUNT_CLEANUP = "AuthAccountCleanup"


DEFAULT_MESSAGES = {
    Reason.INVALID_CPF: "CPF inválido.",
    Reason.MISSING_FIELD: "Preencha todos os campos obrigatórios.",
    Reason.INVALID_CHOICE: "Seleção de opções inválida.",
    Reason.INVALID_PERIOD: "Período inválido.",
    Reason.DUPLICATE_CPF: "CPF já cadastrado.",
    Reason.DUPLICATE_USERNAME: "Nome de usuário já existe.",
    Reason.DUPLICATE_HOUSE: "Unidade já possui cadastro.",
    Reason.AREA_TAKEN: "Esta área já está reservada para este dia.",
    Reason.DUPLICATE_VOTE: "Sua unidade já registrou um voto nesta votação.",
    Reason.CROSS_EXCLUSIVITY: "Esta unidade já possui outra área reservada para este dia.",
    Reason.PAST_DATE: "Não é possível reservar datas passadas.",
    Reason.LEAD_TIME_EXCEEDED: "Data fora do prazo permitido para reserva.",
    Reason.FORBIDDEN: "Você não tem permissão para esta ação.",
    Reason.EDIT_WINDOW_CLOSED: "Não é mais possível editar este registro.",
    Reason.VOTING_NOT_ACTIVE: "Esta votação não está aberta.",
    Reason.NOT_FOUND: "Registro não encontrado.",
    Reason.AUTH_FAILED: "Falha de autenticação.",
    Reason.STORE_FAILURE: "Erro ao comunicar com o servidor.",
    Reason.AUTH_ACCOUNT_CLEANUP: "Erro ao excluir usuário no Auth.",
}

# Códigos conhecidos do provedor de identidade
AUTH_CODE_MESSAGES = {
    "auth/email-already-in-use": "Este nome de usuário já está em uso.",
    "auth/weak-password": "A senha é muito fraca.",
    "auth/invalid-email": "Nome de usuário inválido.",
    "auth/invalid-credential": "Usuário ou senha incorretos.",
    "auth/user-not-found": "Usuário ou senha incorretos.",
    "auth/user-disabled": "Conta desativada.",
}


def friendly_message(code: Optional[str], fallback: str = "Erro desconhecido.") -> str:
    """Mapeia um código do provedor para uma mensagem legível"""
    if not code:
        return fallback
    return AUTH_CODE_MESSAGES.get(code, fallback)


class CondoError(Exception):
    """Erro base do sistema"""

    def __init__(self, reason: Reason, message: Optional[str] = None):
        self.reason = reason
        self.message = message or DEFAULT_MESSAGES.get(reason, "Erro.")
        super().__init__(self.message)

    def __repr__(self):
        return f"{type(self).__name__}({self.reason.value!r}, {self.message!r})"


class ValidationError(CondoError):
    """Entrada inválida detectada localmente, antes de qualquer chamada remota"""
    pass


class ConflictError(CondoError):
    """Violação de unicidade ou exclusividade"""
    pass


class PolicyError(CondoError):
    """Violação de regra de papel ou de data"""
    pass


class RemoteError(CondoError):
    """Falha do próprio backend (store, auth, storage)"""

    def __init__(
        self,
        reason: Reason = Reason.STORE_FAILURE,
        message: Optional[str] = None,
        code: Optional[str] = None
    ):
        self.code = code
        if message is None and code:
            message = friendly_message(code, DEFAULT_MESSAGES[reason])
        super().__init__(reason, message)


class NotFoundError(RemoteError):
    """Documento inexistente no store"""

    def __init__(self, collection: str, doc_id: str, message: Optional[str] = None):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(Reason.NOT_FOUND, message, code="not-found")


class PartialFailureError(CondoError):
    """
    Efeito colateral falhou depois que o efeito principal já foi aplicado.
    O efeito principal NÃO é desfeito.
    """

    def __init__(self, reason: Reason, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(reason, message)
