"""Vocabulary constants shared by the schema and entity-graph passes."""

from __future__ import annotations

from typing import Any

# ── Namespace Constants ────────────────────────────────────────────

OWL = "http://www.w3.org/2002/07/owl#"
RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS = "http://www.w3.org/2000/01/rdf-schema#"
XSD = "http://www.w3.org/2001/XMLSchema#"
CCO = "http://www.ontologyrepository.com/CommonCoreOntologies/"

OWL_CLASS = f"{OWL}Class"
OWL_NAMED_INDIVIDUAL = f"{OWL}NamedIndividual"
OWL_OBJECT_PROPERTY = f"{OWL}ObjectProperty"
OWL_DATATYPE_PROPERTY = f"{OWL}DatatypeProperty"
RDFS_SUBCLASS_OF = f"{RDFS}subClassOf"
RDFS_DOMAIN = f"{RDFS}domain"
RDFS_RANGE = f"{RDFS}range"
RDFS_LABEL = f"{RDFS}label"

LABEL_KEYS = (RDFS_LABEL, "rdfs:label", "label")

# Datatypes implied by the Common Core "has_*_value" predicates.
PREDICATE_TO_DATATYPE = {
    f"{CCO}has_text_value": "rdf:langString",
    f"{CCO}has_integer_value": "xsd:integer",
    f"{CCO}has_decimal_value": "xsd:decimal",
    f"{CCO}has_date_value": "xsd:date",
    f"{CCO}has_datetime_value": "xsd:dateTime",
    f"{CCO}has_boolean_value": "xsd:boolean",
}

SCHEMA_CONTEXT = {
    "rdfs": RDFS,
    "rdf": RDF,
    "owl": OWL,
    "xsd": XSD,
}

_NAMESPACE_PREFIXES = (
    (XSD, "xsd:"),
    ("https://www.w3.org/2001/XMLSchema#", "xsd:"),
    (RDF, "rdf:"),
    ("https://www.w3.org/1999/02/22-rdf-syntax-ns#", "rdf:"),
)


def normalize_datatype(dt: Any) -> Any:
    """Shorten an XSD/RDF datatype IRI to its ``xsd:``/``rdf:`` CURIE.

    Values that are already prefixed, unknown IRIs and non-strings are
    returned unchanged.
    """
    if not dt or not isinstance(dt, str):
        return dt
    for base, prefix in _NAMESPACE_PREFIXES:
        if dt.startswith(base):
            return prefix + dt[len(base):]
    return dt


def is_term(value: Any, full_iri: str, curie: str) -> bool:
    """True when *value* spells a vocabulary term as full IRI or CURIE."""
    return value == full_iri or value == curie
