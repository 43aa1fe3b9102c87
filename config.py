"""
Chart assistant configuration using environment variables and .env file support.

This module loads configuration from environment variables with .env file taking precedence.
The .env file values override system environment variables to ensure consistent configuration.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
# Use override=True to prioritize .env file over system environment variables
load_dotenv(override=True)

# Application environment (optional)
# Environment variable: APP_ENV
# "production" disables the developer-only diagnostic logging path
app_env = os.getenv('APP_ENV', 'development').strip().lower()

# Logging Configuration (optional)
# Environment variables: LOG_LEVEL, LOG_DIRECTORY
# An empty LOG_DIRECTORY keeps logging on the console only
log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
log_directory = os.getenv('LOG_DIRECTORY', '')

# Backend webhook URL (optional)
# Environment variable: WEBHOOK_URL
webhook_url = os.getenv('WEBHOOK_URL', 'https://n8n.autografia.app.br/webhook/bot')

# Request timeout in seconds for the backend call (optional)
# Environment variable: REQUEST_TIMEOUT_SECONDS
request_timeout_seconds = float(os.getenv('REQUEST_TIMEOUT_SECONDS', '30'))

# Rate Limiting Configuration (optional)
# Environment variables: RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_SECONDS
# Default values: 10 requests per 60 second window, tracked per conversation
rate_limit_max_requests = int(os.getenv('RATE_LIMIT_MAX_REQUESTS', '10'))
rate_limit_window_seconds = float(os.getenv('RATE_LIMIT_WINDOW_SECONDS', '60'))

# Input limits (optional)
# Environment variables: MAX_MESSAGE_LENGTH, MAX_HISTORY_LENGTH, MAX_CONVERSATION_ID_LENGTH
max_message_length = int(os.getenv('MAX_MESSAGE_LENGTH', '10000'))
max_history_length = int(os.getenv('MAX_HISTORY_LENGTH', '100'))
max_conversation_id_length = int(os.getenv('MAX_CONVERSATION_ID_LENGTH', '100'))

# Chart policy (optional)
# Environment variable: PIE_MAX_ROWS
# Maximum number of rows for which a pie chart is offered
pie_max_rows = int(os.getenv('PIE_MAX_ROWS', '8'))

# Conversation id persistence (optional)
# Environment variable: CONVERSATION_DB_PATH
conversation_db_path = os.getenv('CONVERSATION_DB_PATH', 'chat_state.db')

# Error Messages
ERROR_MESSAGES = {
    'invalid_message': "Mensagem inválida.",
    'empty_message': "Mensagem não pode estar vazia.",
    'message_too_long': "Mensagem muito longa. Máximo de {max_length} caracteres.",
    'invalid_conversation_id': "ConversationId inválido.",
    'conversation_id_too_long': "ConversationId muito longo.",
    'conversation_id_format': "ConversationId em formato inválido.",
    'history_not_list': "Histórico deve ser uma lista.",
    'history_too_long': "Histórico muito longo. Máximo de {max_length} mensagens.",
    'history_invalid_role': "Role inválida no histórico.",
    'rate_limit_exceeded': "Muitas requisições. Aguarde {seconds} segundo{plural} antes de tentar novamente.",
    'timeout': "Tempo de espera esgotado. Tente novamente.",
    'server_error': "Erro no servidor. Tente novamente mais tarde.",
    'not_found': "Endpoint não encontrado.",
    'access_denied': "Acesso negado.",
    'request_failed': "Erro ao processar requisição. Tente novamente.",
    'invalid_response_format': "Resposta do servidor em formato inválido.",
    'invalid_response_output': "Resposta do servidor não contém dados válidos.",
    'connection_error': "Ocorreu um erro ao comunicar com o servidor. Tente novamente.",
    'cancelled': "A requisição foi cancelada. Tente novamente.",
    'unknown_error': "Erro desconhecido ao comunicar com o servidor.",
}
