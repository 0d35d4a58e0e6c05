"""
Test suite for the weekly schedule endpoints.

System role: Verification of the schedule registry HTTP API
"""

import uuid
from datetime import datetime, time
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from academy_scheduler.api.deps import get_schedule_service
from academy_scheduler.api.main import create_app
from academy_scheduler.core.enums import Classroom, DayOfWeek
from academy_scheduler.core.exceptions import (
    GroupCancelled,
    GroupNotFound,
    InvalidTimeFormat,
    ScheduleConflict,
    ScheduleNotFound,
)


def make_schedule(**overrides) -> SimpleNamespace:
    """Stand-in for a WeeklyScheduleModel row."""
    now = datetime(2024, 1, 1, 12, 0)
    fields = dict(
        id=uuid.uuid4(),
        group_id=uuid.uuid4(),
        day_of_week=DayOfWeek.MONDAY,
        start_time=time(9, 0),
        end_time=time(11, 0),
        classroom=Classroom.AULA_PORTAL1,
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture
def client(mock_schedule_service):
    """TestClient with the schedule service overridden."""
    app = create_app()
    app.dependency_overrides[get_schedule_service] = lambda: mock_schedule_service
    return TestClient(app)


class TestCreateScheduleEndpoint:
    """Test suite for POST /api/v1/schedules."""

    def test_create_should_return_201_with_wire_times(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test times come back as HH:MM strings."""
        # Arrange
        schedule = make_schedule()
        mock_schedule_service.create_schedule.return_value = schedule

        # Act
        response = client.post(
            "/api/v1/schedules",
            json={
                "group_id": str(schedule.group_id),
                "day_of_week": "MONDAY",
                "start_time": "09:00",
                "end_time": "11:00",
                "classroom": "AULA_PORTAL1",
            },
        )

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["id"] == str(schedule.id)
        assert (data["start_time"], data["end_time"]) == ("09:00", "11:00")
        assert data["day_of_week"] == "MONDAY"
        kwargs = mock_schedule_service.create_schedule.call_args.kwargs
        assert kwargs["day_of_week"] is DayOfWeek.MONDAY
        assert kwargs["classroom"] is Classroom.AULA_PORTAL1

    def test_create_should_reject_sunday(self, client: TestClient) -> None:
        """Test Sunday is not an accepted day."""
        # Act
        response = client.post(
            "/api/v1/schedules",
            json={
                "group_id": str(uuid.uuid4()),
                "day_of_week": "SUNDAY",
                "start_time": "09:00",
                "end_time": "11:00",
                "classroom": "AULA_PORTAL1",
            },
        )

        # Assert
        assert response.status_code == 422

    def test_create_should_map_overlap_to_409(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test the conflict body names the sibling and the window."""
        # Arrange
        sibling_id = uuid.uuid4()
        mock_schedule_service.create_schedule.side_effect = ScheduleConflict(
            sibling_id, DayOfWeek.MONDAY, "10:00", "11:00"
        )

        # Act
        response = client.post(
            "/api/v1/schedules",
            json={
                "group_id": str(uuid.uuid4()),
                "day_of_week": "MONDAY",
                "start_time": "10:00",
                "end_time": "12:00",
                "classroom": "AULA_PORTAL2",
            },
        )

        # Assert
        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["error"] == "ScheduleConflict"
        assert detail["details"]["conflicting_schedule_id"] == str(sibling_id)
        assert detail["details"]["overlap_start"] == "10:00"
        assert detail["retryable"] is False

    @pytest.mark.parametrize(
        "error,expected_status",
        [
            (GroupNotFound(uuid.uuid4()), 404),
            (GroupCancelled(uuid.uuid4()), 409),
            (InvalidTimeFormat("Start time must be before end time", field="end_time"), 422),
        ],
    )
    def test_create_should_map_domain_errors(
        self, client: TestClient, mock_schedule_service, error, expected_status: int
    ) -> None:
        """Test each error family maps to its status code."""
        # Arrange
        mock_schedule_service.create_schedule.side_effect = error

        # Act
        response = client.post(
            "/api/v1/schedules",
            json={
                "group_id": str(uuid.uuid4()),
                "day_of_week": "FRIDAY",
                "start_time": "11:00",
                "end_time": "09:00",
                "classroom": "AULA_VIRTUAL",
            },
        )

        # Assert
        assert response.status_code == expected_status
        assert response.json()["detail"]["error"] == type(error).__name__


class TestReadScheduleEndpoints:
    """Test suite for schedule queries."""

    def test_list_should_pass_filters(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test day and classroom filters are parsed into enums."""
        # Arrange
        mock_schedule_service.list_all_schedules.return_value = [make_schedule()]

        # Act
        response = client.get(
            "/api/v1/schedules", params={"day_of_week": "MONDAY", "classroom": "AULA_PORTAL1"}
        )

        # Assert
        assert response.status_code == 200
        assert len(response.json()) == 1
        mock_schedule_service.list_all_schedules.assert_awaited_once_with(
            day_of_week=DayOfWeek.MONDAY, classroom=Classroom.AULA_PORTAL1, group_id=None
        )

    def test_get_should_map_missing_to_404(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test an unknown schedule id is a 404."""
        # Arrange
        schedule_id = uuid.uuid4()
        mock_schedule_service.get_schedule.side_effect = ScheduleNotFound(schedule_id)

        # Act
        response = client.get(f"/api/v1/schedules/{schedule_id}")

        # Assert
        assert response.status_code == 404
        assert response.json()["detail"]["details"]["schedule_id"] == str(schedule_id)

    def test_get_should_reject_malformed_id(self, client: TestClient) -> None:
        """Test path ids must be UUIDs."""
        # Act
        response = client.get("/api/v1/schedules/not-a-uuid")

        # Assert
        assert response.status_code == 422

    def test_group_schedules_should_list_in_order(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test the group route returns schedules as the service orders them."""
        # Arrange
        group_id = uuid.uuid4()
        mock_schedule_service.list_schedules.return_value = [
            make_schedule(group_id=group_id, day_of_week=DayOfWeek.MONDAY),
            make_schedule(group_id=group_id, day_of_week=DayOfWeek.THURSDAY),
        ]

        # Act
        response = client.get(f"/api/v1/groups/{group_id}/schedules")

        # Assert
        assert response.status_code == 200
        assert [s["day_of_week"] for s in response.json()] == ["MONDAY", "THURSDAY"]
        mock_schedule_service.list_schedules.assert_awaited_once_with(group_id)


class TestUpdateScheduleEndpoint:
    """Test suite for PUT /api/v1/schedules/{id}."""

    def test_update_should_reject_empty_body(self, client: TestClient) -> None:
        """Test an update without fields is a 422."""
        # Act
        response = client.put(f"/api/v1/schedules/{uuid.uuid4()}", json={})

        # Assert
        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "ValidationError"

    def test_update_should_forward_only_set_fields(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test omitted fields are not sent to the service."""
        # Arrange
        schedule = make_schedule(end_time=time(12, 0))
        mock_schedule_service.update_schedule.return_value = schedule

        # Act
        response = client.put(f"/api/v1/schedules/{schedule.id}", json={"end_time": "12:00"})

        # Assert
        assert response.status_code == 200
        assert response.json()["end_time"] == "12:00"
        mock_schedule_service.update_schedule.assert_awaited_once_with(
            schedule.id, end_time="12:00"
        )


class TestDeleteScheduleEndpoint:
    """Test suite for DELETE /api/v1/schedules/{id}."""

    def test_delete_should_return_message(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test deletion acknowledges with the schedule id."""
        # Arrange
        schedule_id = uuid.uuid4()
        mock_schedule_service.delete_schedule.return_value = True

        # Act
        response = client.delete(f"/api/v1/schedules/{schedule_id}")

        # Assert
        assert response.status_code == 200
        assert response.json() == {"message": f"Schedule {schedule_id} deleted"}

    def test_delete_should_map_cancelled_group_to_409(
        self, client: TestClient, mock_schedule_service
    ) -> None:
        """Test schedules of a cancelled group cannot be deleted."""
        # Arrange
        mock_schedule_service.delete_schedule.side_effect = GroupCancelled(uuid.uuid4())

        # Act
        response = client.delete(f"/api/v1/schedules/{uuid.uuid4()}")

        # Assert
        assert response.status_code == 409
        assert response.json()["detail"]["details"]["invariant"] == "group_not_cancelled"
