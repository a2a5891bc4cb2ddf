"""
Integration tests: CSV tracking import against a stubbed table service.

The runner, records layer and table-service client run for real; only the
HTTP transport is replaced.
"""

import pytest
from ingestion.extractors.csv_extractor import TrackingCSVExtractor
from ingestion.runner import TrackingImportRunner


@pytest.fixture
def items_page(record_factory):
    return [
        record_factory("recItem1", trackingNumber="AFQ0001", status="china_warehouse"),
        record_factory("recItem2", trackingNumber="AFQ0002", status="in_transit", containerNumber="CONT-1"),
    ]


class TestTrackingImportPipeline:

    @pytest.mark.asyncio
    async def test_full_import(self, records_service, airtable_stub, items_page, record_factory):
        airtable_stub.queue_records(*items_page)
        airtable_stub.queue_records(record_factory("recItem1", trackingNumber="AFQ0001", status="in_transit"))
        airtable_stub.queue_records(record_factory("recItem2", trackingNumber="AFQ0002", status="arrived_ghana"))

        content = (
            b"Tracking Number,Status,Container\n"
            b"afq0001,in_transit,CONT-2\n"
            b"AFQ0002,Arrived Ghana,\n"
        )
        summary = await TrackingImportRunner(records_service).run_file(TrackingCSVExtractor(content))

        assert summary.status == "success"
        assert summary.success_count == 2

        list_call, first_update, second_update = airtable_stub.requests
        assert list_call.method == "GET"
        assert airtable_stub.body(1)["records"] == [
            {"id": "recItem1", "fields": {"status": "in_transit", "containerNumber": "CONT-2"}}
        ]
        assert airtable_stub.body(2)["records"] == [
            {"id": "recItem2", "fields": {"status": "arrived_ghana"}}
        ]

    @pytest.mark.asyncio
    async def test_table_error_on_one_row(self, records_service, airtable_stub, items_page, record_factory):
        airtable_stub.queue_records(*items_page)
        airtable_stub.queue(422, {"error": {"type": "INVALID_VALUE_FOR_COLUMN", "message": "Bad status"}})
        airtable_stub.queue_records(record_factory("recItem2", status="delivered"))

        content = b"tracking,status\nAFQ0001,delivered\nAFQ0002,delivered\nAFQ0404,delivered\n"
        summary = await TrackingImportRunner(records_service).run_file(TrackingCSVExtractor(content))

        assert summary.status == "partial_success"
        assert [r.success for r in summary.results] == [False, True, False]
        assert summary.results[0].message.startswith("Update failed: ")
        assert "Bad status" in summary.results[0].message
        assert summary.results[2].row_number == 4
        assert len(airtable_stub.requests) == 3
