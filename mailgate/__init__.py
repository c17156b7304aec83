"""Gateway de notificações: webhooks de monitoramento -> e-mail.

Este pacote contém:
- config: configuração imutável carregada do ambiente
- constants: enumerações (eventType/impactLevel) e templates por severidade
- classifier: validação e normalização do payload recebido
- formatters / notifications: montagem do assunto e corpo por severidade
- services: Mailer SMTP (envio e verificação de conexão)
- dispatch: agendamento do envio em background
- health: status do serviço de e-mail
- controller: criação do Flask app e endpoints
"""
