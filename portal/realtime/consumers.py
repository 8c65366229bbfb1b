import json

from channels.generic.websocket import AsyncWebsocketConsumer

from portal.services.notifications import hospital_group, user_group


class AppointmentUpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes ``appointment.changed`` events to patients and hospital admins."""

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close(code=4001)
            return

        self.groups_joined = [user_group(user.id)]
        if getattr(user, "role", None) == "admin" and getattr(user, "hospital_id", None):
            self.groups_joined.append(hospital_group(user.hospital_id))
        for group in self.groups_joined:
            await self.channel_layer.group_add(group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        for group in getattr(self, "groups_joined", []):
            await self.channel_layer.group_discard(group, self.channel_name)

    async def appointment_changed(self, event):
        # event: {"type": "appointment.changed", "event": "...", "appointmentId": int, ...}
        await self.send(json.dumps(event))
