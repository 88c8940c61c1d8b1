from __future__ import annotations

JOB_ROLE_DEFINITIONS = [
    {"name": "Engenharia", "type": "department", "sort_order": 1},
    {"name": "Vendas", "type": "department", "sort_order": 2},
    {"name": "Suporte", "type": "department", "sort_order": 3},
    {"name": "Gerência", "type": "department", "sort_order": 4},
    {"name": "Outro", "type": "department", "sort_order": 99},
    {"name": "Desenvolvedor", "type": "client_role", "sort_order": 1},
    {"name": "Gerente", "type": "client_role", "sort_order": 2},
    {"name": "Analista", "type": "client_role", "sort_order": 3},
    {"name": "Técnico", "type": "client_role", "sort_order": 4},
    {"name": "Outro", "type": "client_role", "sort_order": 99},
]

# Sample catalog for local environments; production tutorials are managed by admins.
TUTORIAL_DEFINITIONS = [
    {
        "name": "Primeiros passos na plataforma",
        "description": "Visão geral do painel, cadastro de usuários e configurações iniciais.",
        "tag": "onboarding",
        "id_cademi": 1001,
    },
    {
        "name": "Emissão de notas fiscais",
        "description": "Configuração de certificados e emissão de NF-e passo a passo.",
        "tag": "fiscal",
        "id_cademi": 1002,
    },
    {
        "name": "Relatórios gerenciais",
        "description": "Como montar e exportar relatórios de vendas e estoque.",
        "tag": "relatorios",
        "id_cademi": 1003,
    },
    {
        "name": "Integrações via API",
        "description": "Autenticação, webhooks e limites de uso da API pública.",
        "tag": "integracoes",
        "id_cademi": 1004,
    },
]
