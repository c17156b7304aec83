import hmac
import logging

from flask import Flask, jsonify, request

from .config import GatewayConfig, load_config
from .dispatch import DispatchEngine, unexpected_error
from .errors import AuthError
from .health import check_status
from .services import SMTPMailer
from .utils import utc_timestamp

logger = logging.getLogger(__name__)


def create_app(config: GatewayConfig = None, mailer=None, engine: DispatchEngine = None):
    config = config or load_config()
    mailer = mailer or SMTPMailer(config)
    engine = engine or DispatchEngine(config, mailer)

    app = Flask(__name__)
    app.extensions['mailgate.engine'] = engine
    app.extensions['mailgate.mailer'] = mailer

    @app.before_request
    def require_secret():
        # Gate opcional: só vale para /api quando WEBHOOK_SECRET está definido
        if not config.auth_enabled or not request.path.startswith('/api/'):
            return None
        provided = request.headers.get(config.secret_header, '')
        if not hmac.compare_digest(provided.encode('utf-8'), config.webhook_secret.encode('utf-8')):
            raise AuthError(f"invalid or missing {config.secret_header} header")
        return None

    @app.errorhandler(AuthError)
    def unauthorized(e):
        logger.warning("Unauthorized request to %s from %s: %s", request.path, request.remote_addr, e)
        return jsonify({'error': 'Unauthorized'}), 401

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok', 'timestamp': utc_timestamp()}), 200

    @app.route('/api/webhook/email', methods=['POST'])
    def webhook_email():
        request_id = request.headers.get('X-Request-ID')
        try:
            data = request.get_json(force=True)
        except Exception as e:
            logger.error("Error processing email webhook: %s", e)
            ack = unexpected_error(e)
        else:
            if config.debug:
                logger.debug("Received webhook data: %s", data)
            ack = engine.dispatch(data, request_id=request_id)
        return jsonify(ack.body), ack.status_code

    @app.route('/api/webhook/email/status', methods=['GET'])
    def webhook_email_status():
        report = check_status(mailer)
        return jsonify(report.to_dict()), report.status_code

    return app
