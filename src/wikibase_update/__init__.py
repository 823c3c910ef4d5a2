__version__ = "0.1.0"

from .exceptions import (
    WikibaseUpdateError as WikibaseUpdateError,
    MissingValueError as MissingValueError,
    ValidationError as ValidationError,
    ConflictError as ConflictError,
)

from .models import (
    WIKIDATA_SITE_IRI as WIKIDATA_SITE_IRI,
    EntityKind as EntityKind,
    StatementRank as StatementRank,
    EntityId as EntityId,
    MonolingualText as MonolingualText,
    Statement as Statement,
    SiteLink as SiteLink,
    item_id as item_id,
    property_id as property_id,
    lexeme_id as lexeme_id,
    form_id as form_id,
    sense_id as sense_id,
    mediainfo_id as mediainfo_id,
)

from .documents import (
    EntityDocument as EntityDocument,
    ItemDocument as ItemDocument,
    PropertyDocument as PropertyDocument,
    MediaInfoDocument as MediaInfoDocument,
    LexemeDocument as LexemeDocument,
    SenseDocument as SenseDocument,
    FormDocument as FormDocument,
    document_type_for as document_type_for,
)

from .updates import (
    TermUpdate as TermUpdate,
    AliasUpdate as AliasUpdate,
    StatementUpdate as StatementUpdate,
    SiteLinkUpdate as SiteLinkUpdate,
    EntityUpdate as EntityUpdate,
    StatementDocumentUpdate as StatementDocumentUpdate,
    LabeledStatementDocumentUpdate as LabeledStatementDocumentUpdate,
    TermedStatementDocumentUpdate as TermedStatementDocumentUpdate,
    ItemUpdate as ItemUpdate,
    PropertyUpdate as PropertyUpdate,
    MediaInfoUpdate as MediaInfoUpdate,
    LexemeUpdate as LexemeUpdate,
    SenseUpdate as SenseUpdate,
    FormUpdate as FormUpdate,
)

from .terms import (
    TermUpdateBuilder as TermUpdateBuilder,
    AliasUpdateBuilder as AliasUpdateBuilder,
)
from .statements import StatementUpdateBuilder as StatementUpdateBuilder
from .sitelinks import SiteLinkUpdateBuilder as SiteLinkUpdateBuilder

from .builders import (
    EntityUpdateBuilder as EntityUpdateBuilder,
    StatementDocumentUpdateBuilder as StatementDocumentUpdateBuilder,
    LabeledStatementDocumentUpdateBuilder as LabeledStatementDocumentUpdateBuilder,
    TermedStatementDocumentUpdateBuilder as TermedStatementDocumentUpdateBuilder,
    ItemUpdateBuilder as ItemUpdateBuilder,
    PropertyUpdateBuilder as PropertyUpdateBuilder,
    MediaInfoUpdateBuilder as MediaInfoUpdateBuilder,
    LexemeUpdateBuilder as LexemeUpdateBuilder,
    SenseUpdateBuilder as SenseUpdateBuilder,
    FormUpdateBuilder as FormUpdateBuilder,
    builder_type_for as builder_type_for,
)

# Batch module - import as submodule to keep the YAML dependency out of the core namespace
from . import batch

__all__ = [
    "batch",
    # Exceptions
    "WikibaseUpdateError",
    "MissingValueError",
    "ValidationError",
    "ConflictError",
    # Identities and values
    "WIKIDATA_SITE_IRI",
    "EntityKind",
    "StatementRank",
    "EntityId",
    "MonolingualText",
    "Statement",
    "SiteLink",
    "item_id",
    "property_id",
    "lexeme_id",
    "form_id",
    "sense_id",
    "mediainfo_id",
    # Base revisions
    "EntityDocument",
    "ItemDocument",
    "PropertyDocument",
    "MediaInfoDocument",
    "LexemeDocument",
    "SenseDocument",
    "FormDocument",
    "document_type_for",
    # Updates
    "TermUpdate",
    "AliasUpdate",
    "StatementUpdate",
    "SiteLinkUpdate",
    "EntityUpdate",
    "StatementDocumentUpdate",
    "LabeledStatementDocumentUpdate",
    "TermedStatementDocumentUpdate",
    "ItemUpdate",
    "PropertyUpdate",
    "MediaInfoUpdate",
    "LexemeUpdate",
    "SenseUpdate",
    "FormUpdate",
    # Builders
    "TermUpdateBuilder",
    "AliasUpdateBuilder",
    "StatementUpdateBuilder",
    "SiteLinkUpdateBuilder",
    "EntityUpdateBuilder",
    "StatementDocumentUpdateBuilder",
    "LabeledStatementDocumentUpdateBuilder",
    "TermedStatementDocumentUpdateBuilder",
    "ItemUpdateBuilder",
    "PropertyUpdateBuilder",
    "MediaInfoUpdateBuilder",
    "LexemeUpdateBuilder",
    "SenseUpdateBuilder",
    "FormUpdateBuilder",
    "builder_type_for",
]
