"""Rollcall: QR badge check-in tracker."""
