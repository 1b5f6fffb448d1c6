"""Document model and the Provider contract every document backend satisfies."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from .context import RequestContext


class Document(BaseModel):
    """A flat, agent-consumable document."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    text: str
    url: str | None = None
    metadata: dict[str, str] | None = None

    def to_dict(self) -> dict:
        """Serializable form; absent url/metadata are left out."""
        return self.model_dump(exclude_none=True)


class Provider(ABC):
    """Backend capability contract behind the search/fetch tools."""

    @abstractmethod
    def search_syntax(self) -> str:
        """Describe the query syntax; used as the search tool description."""

    @abstractmethod
    async def search(self, ctx: RequestContext, query: str) -> list[Document]:
        """Return one Document per mappable result, in backend order.

        Raises:
            ArgumentError: query is empty (no backend call is made)
        """

    @abstractmethod
    async def fetch(self, ctx: RequestContext, id: str) -> Document:
        """Return the full Document for id.

        Raises:
            MissingCredentialError: no token in ctx
            BackendError: the id does not exist or the backend failed
        """
