"""Unit tests for handle extraction from create responses."""

from casesync.core.response import parse_handles
from casesync.tests.fakes import handles_response_body


def test_parses_namespaced_response() -> None:
    handles = parse_handles(handles_response_body("P1", "PO1", "C1"))

    assert handles.person_handle == "P1"
    assert handles.position_handle == "PO1"
    assert handles.case_handle == "C1"
    assert handles.is_complete


def test_parses_unprefixed_response() -> None:
    body = """<?xml version="1.0" encoding="UTF-8"?>
    <Envelope>
      <Body>
        <PersonResponse><personHandle>P2</personHandle></PersonResponse>
        <PositionResponse><positionHandle>PO2</positionHandle></PositionResponse>
        <CaseResponse><caseHandle>C2</caseHandle></CaseResponse>
      </Body>
    </Envelope>"""

    handles = parse_handles(body)

    assert handles.to_dict() == {
        "personHandle": "P2",
        "positionHandle": "PO2",
        "caseHandle": "C2",
    }


def test_tolerates_mixed_namespaces_per_element() -> None:
    body = (
        '<a:Root xmlns:a="urn:a" xmlns:b="urn:b" xmlns="urn:default">'
        "<b:PersonResponse><a:personHandle>P3</a:personHandle></b:PersonResponse>"
        "<PositionResponse><b:positionHandle>PO3</b:positionHandle></PositionResponse>"
        "<a:CaseResponse><caseHandle>C3</caseHandle></a:CaseResponse>"
        "</a:Root>"
    )

    handles = parse_handles(body)

    assert (handles.person_handle, handles.position_handle, handles.case_handle) == (
        "P3",
        "PO3",
        "C3",
    )


def test_trims_surrounding_whitespace() -> None:
    body = (
        "<r><PersonResponse><personHandle>\n   P4  \n</personHandle></PersonResponse>"
        "<PositionResponse><positionHandle>\tPO4</positionHandle></PositionResponse>"
        "<CaseResponse><caseHandle>C4 </caseHandle></CaseResponse></r>"
    )

    handles = parse_handles(body)

    assert handles.person_handle == "P4"
    assert handles.position_handle == "PO4"
    assert handles.case_handle == "C4"


def test_missing_element_yields_empty_handle() -> None:
    handles = parse_handles(handles_response_body("P1", "PO1", ""))

    assert handles.case_handle == ""
    assert not handles.is_complete
    assert handles.missing() == ("caseHandle",)


def test_handle_must_sit_under_its_response_element() -> None:
    body = "<r><Other><personHandle>P5</personHandle></Other></r>"

    assert parse_handles(body).person_handle == ""


def test_malformed_body_yields_empty_handles() -> None:
    handles = parse_handles("<html>Service Unavailable")

    assert handles.to_dict() == {
        "personHandle": "",
        "positionHandle": "",
        "caseHandle": "",
    }


def test_empty_body_yields_empty_handles() -> None:
    assert not parse_handles("").is_complete


def test_tolerates_whitespace_before_xml_declaration() -> None:
    body = '\n  <?xml version="1.0" encoding="UTF-8"?>' + handles_response_body()

    handles = parse_handles(body)

    assert handles.is_complete
    assert handles.case_handle == "C1"
