import atexit

from dotenv import load_dotenv

load_dotenv()

from mailgate.config import load_config  # noqa: E402
from mailgate.controller import create_app  # noqa: E402
from mailgate.logging_setup import setup_logging  # noqa: E402

config = load_config()
setup_logging(config.log_level, debug=config.debug)

app = create_app(config)
# Drena os envios pendentes antes de encerrar o processo
atexit.register(app.extensions['mailgate.engine'].shutdown)

if __name__ == '__main__':
    # use_reloader=False evita duas instâncias do pool de envio
    # quando DEBUG_MODE está ativo (Flask cria 2 processos com reloader)
    app.run(host='0.0.0.0', port=config.port, debug=config.debug, use_reloader=False)
