#!/usr/bin/env python3
import os
import sys
import threading
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from fakes import RecordingMailer, make_config
from mailgate.constants import EventType
from mailgate.dispatch import DispatchEngine
from mailgate.errors import DeliveryError
from mailgate.models import DispatchState


class TestDispatchEngine(unittest.TestCase):
    def setUp(self):
        self.mailer = RecordingMailer()
        self.engine = DispatchEngine(make_config(), self.mailer)

    def tearDown(self):
        self.engine.shutdown(wait=True)

    def test_valid_payload_is_acknowledged_and_sent(self):
        ack = self.engine.dispatch({'subject': 'DB down', 'content': 'conn refused', 'eventType': 'ERROR',
                                    'impactLevel': 'CRITICAL'})
        self.assertEqual(ack.status_code, 202)
        self.assertEqual(ack.state, DispatchState.ACKNOWLEDGED)
        self.assertTrue(ack.accepted)
        self.assertEqual(ack.body, {'message': 'Email will be sent in the background', 'eventType': 'ERROR'})

        self.assertTrue(self.engine.join(timeout=5))
        self.assertEqual(self.mailer.methods(), ['send_error_alert'])
        message = self.mailer.calls[0][1]
        self.assertIn('conn refused', message.text_body)
        self.assertIn('Impact Level: CRITICAL', message.text_body)

    def test_missing_event_type_defaults_to_info(self):
        ack = self.engine.dispatch({'subject': 's', 'content': 'c'})
        self.assertEqual(ack.body['eventType'], 'INFO')
        self.assertEqual(ack.event_type, EventType.INFO)
        self.engine.join(timeout=5)
        self.assertEqual(self.mailer.methods(), ['send_info'])

    def test_each_severity_uses_its_send_method(self):
        for event_type in ('ERROR', 'WARNING', 'SUCCESS', 'INFO'):
            self.engine.dispatch({'subject': event_type, 'content': 'c', 'eventType': event_type})
        self.engine.join(timeout=5)
        self.assertCountEqual(self.mailer.methods(), [
            'send_error_alert', 'send_warning', 'send_success_notification', 'send_info',
        ])

    def test_invalid_payloads_are_rejected_without_scheduling(self):
        payloads = [
            {'content': 'c'},
            {'subject': 's'},
            {'subject': 's', 'content': 'c', 'eventType': 'FATAL'},
            {'subject': 's', 'content': 'c', 'impactLevel': 'HUGE'},
        ]
        with patch.object(self.engine, 'schedule') as schedule:
            for payload in payloads:
                with self.subTest(payload=payload):
                    ack = self.engine.dispatch(payload)
                    self.assertEqual(ack.status_code, 400)
                    self.assertEqual(ack.state, DispatchState.REJECTED)
                    self.assertIn('error', ack.body)
                    self.assertIn('details', ack.body)
            schedule.assert_not_called()
        self.assertEqual(self.mailer.calls, [])

    def test_same_payload_twice_sends_twice(self):
        payload = {'subject': 'dup', 'content': 'c', 'eventType': 'WARNING'}
        self.engine.dispatch(payload)
        self.engine.dispatch(payload)
        self.engine.join(timeout=5)
        self.assertEqual(self.mailer.methods(), ['send_warning', 'send_warning'])

    def test_delivery_failure_is_logged_not_returned(self):
        self.mailer.send_error = DeliveryError('SMTP delivery failed: boom')
        with self.assertLogs('mailgate.dispatch', level='ERROR') as logs:
            ack = self.engine.dispatch({'subject': 'x', 'content': 'y', 'eventType': 'ERROR'})
            self.assertEqual(ack.status_code, 202)
            self.engine.join(timeout=5)
        self.assertTrue(any('Background email sending failed' in line for line in logs.output))
        self.assertEqual(len(self.mailer.calls), 1)

    def test_unexpected_background_error_is_absorbed(self):
        self.mailer.send_error = RuntimeError('kaboom')
        with self.assertLogs('mailgate.dispatch', level='ERROR'):
            ack = self.engine.dispatch({'subject': 'x', 'content': 'y'})
            self.engine.join(timeout=5)
        self.assertEqual(ack.status_code, 202)

    def test_success_is_logged(self):
        with self.assertLogs('mailgate.dispatch', level='INFO') as logs:
            self.engine.dispatch({'subject': 'Deploy ok', 'content': 'v2', 'eventType': 'SUCCESS'})
            self.engine.join(timeout=5)
        self.assertTrue(any('Email sent successfully: [SUCCESS] Deploy ok' in line for line in logs.output))

    def test_unexpected_synchronous_error_returns_500(self):
        with patch('mailgate.dispatch.classify', side_effect=RuntimeError('parser exploded')):
            ack = self.engine.dispatch({'subject': 's', 'content': 'c'})
        self.assertEqual(ack.status_code, 500)
        self.assertEqual(ack.state, DispatchState.ERRORED)
        self.assertEqual(ack.body, {'error': 'Internal server error', 'details': 'parser exploded'})
        self.assertEqual(self.mailer.calls, [])

    def test_acknowledgement_does_not_wait_for_mailer(self):
        release = threading.Event()
        original = self.mailer.send_info

        def slow_send(message):
            release.wait(5)
            return original(message)

        self.mailer.send_info = slow_send
        ack = self.engine.dispatch({'subject': 's', 'content': 'c'})
        self.assertEqual(ack.status_code, 202)
        self.assertEqual(self.mailer.calls, [])
        self.assertEqual(self.engine.pending_count(), 1)
        release.set()
        self.assertTrue(self.engine.join(timeout=5))
        self.assertEqual(len(self.mailer.calls), 1)

    def test_dispatch_after_shutdown_is_server_error(self):
        self.engine.shutdown(wait=True)
        ack = self.engine.dispatch({'subject': 's', 'content': 'c'})
        self.assertEqual(ack.status_code, 500)


if __name__ == '__main__':
    unittest.main()
