"""
Notification Routes

GET /notifications - List notifications (filters: student_id, admin_id, type, is_read, search)
GET /notifications/unread-count - Unread count (optionally for one student)
GET /notifications/stats/overview - Counts by type
GET /notifications/{notification_id} - Get notification
POST /notifications - Create notification
POST /notifications/bulk - Send one message to a group of students
PUT /notifications/read-all/{student_id} - Mark all of a student's notifications read
PUT /notifications/{notification_id}/read - Mark one notification read
PUT /notifications/{notification_id} - Update notification
DELETE /notifications/{notification_id} - Delete notification
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin
from app.db.postgres import run_in_transaction
from app.repositories.notifications import notification_repository
from app.schemas.schemas import (
    NotificationCreate, NotificationUpdate, BulkNotificationRequest, NotificationResponse, NotificationType,
    UnreadCount, PageResponse, DataResponse, CreatedResponse, CreatedData, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=PageResponse[NotificationResponse])
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    student_id: Optional[int] = Query(None),
    admin_id: Optional[int] = Query(None),
    type: Optional[NotificationType] = Query(None),
    is_read: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
):
    filters = {"student_id": student_id, "admin_id": admin_id, "type": type, "is_read": is_read,
               "search": search}
    rows, pagination = run_in_transaction(notification_repository.list, filters, page, limit)
    return {"data": rows, "pagination": pagination}


@router.get("/unread-count", response_model=DataResponse[UnreadCount])
def unread_count(student_id: Optional[int] = Query(None)):
    count = run_in_transaction(notification_repository.unread_count, student_id)
    return {"data": {"student_id": student_id, "unread": count}}


@router.get("/stats/overview", response_model=DataResponse[Dict[str, int]])
def notification_stats():
    return {"data": run_in_transaction(notification_repository.counts_by_type)}


@router.get("/{notification_id}", response_model=DataResponse[NotificationResponse])
def get_notification(notification_id: int):
    return {"data": run_in_transaction(notification_repository.get, notification_id)}


@router.post("", response_model=CreatedResponse, status_code=201)
def create_notification(data: NotificationCreate, admin: dict = Depends(get_current_admin)):
    payload = data.model_dump()
    if payload.get("admin_id") is None:
        payload["admin_id"] = admin["admin_id"]
    notification_id = run_in_transaction(notification_repository.create, payload)
    return CreatedResponse(message="Notification created successfully", data=CreatedData(id=notification_id))


@router.post("/bulk", response_model=MessageResponse, status_code=201)
def bulk_notify(data: BulkNotificationRequest, admin: dict = Depends(get_current_admin)):
    """Send one message to all, available, selected or specific students."""
    sent = run_in_transaction(
        notification_repository.bulk_send, data.message, data.type.value, data.target.value,
        data.student_ids, admin["admin_id"],
    )
    logger.info("Bulk notification to %s sent to %d students", data.target.value, sent)
    return MessageResponse(message=f"Notification sent to {sent} students")


@router.put("/read-all/{student_id}", response_model=MessageResponse)
def mark_all_read(student_id: int, admin: dict = Depends(get_current_admin)):
    updated = run_in_transaction(notification_repository.mark_all_read, student_id)
    return MessageResponse(message=f"{updated} notifications marked as read")


@router.put("/{notification_id}/read", response_model=MessageResponse)
def mark_read(notification_id: int, admin: dict = Depends(get_current_admin)):
    run_in_transaction(notification_repository.mark_read, notification_id)
    return MessageResponse(message="Notification marked as read")


@router.put("/{notification_id}", response_model=MessageResponse)
def update_notification(notification_id: int, data: NotificationUpdate, admin: dict = Depends(get_current_admin)):
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    run_in_transaction(notification_repository.update, notification_id, patch)
    return MessageResponse(message="Notification updated successfully")


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, admin: dict = Depends(get_current_admin)):
    run_in_transaction(notification_repository.delete, notification_id)
    return MessageResponse(message="Notification deleted successfully")
