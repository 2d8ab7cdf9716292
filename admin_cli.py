"""
Condo Sync - CLI Admin
Ferramenta de linha de comando para a gestão do condomínio

Uso:
    python admin_cli.py login
    python admin_cli.py users list
    python admin_cli.py users role <user_id> <papel>
    python admin_cli.py reservations list [AAAA-MM-DD]
    python admin_cli.py stats [inicio] [fim]
    python admin_cli.py alert "mensagem"
    python admin_cli.py purge
"""
import os
import sys
import httpx
from pathlib import Path

BASE_URL = os.getenv("CONDO_SYNC_URL", "http://localhost:8080")
TOKEN_FILE = Path(".admin_token")

ROLES = ["morador", "gestao", "sindico", "subsindico", "admin"]
AREAS = {
    "churrasco1": "Churrasqueira 1",
    "churrasco2": "Churrasqueira 2",
    "salao_festas": "Salão de Festas",
}


def save_token(token: str):
    TOKEN_FILE.write_text(token)


def load_token() -> str:
    if TOKEN_FILE.exists():
        return TOKEN_FILE.read_text().strip()
    return None


def get_headers():
    token = load_token()
    if not token:
        print("Erro: Faça login primeiro com 'python admin_cli.py login'")
        sys.exit(1)
    return {"Authorization": f"Bearer {token}"}


def error_detail(response: httpx.Response) -> str:
    try:
        return response.json().get("detail", response.text)
    except ValueError:
        return response.text


def cmd_login():
    """Login no sistema"""
    username = input("Usuário [admin]: ").strip() or "admin"
    password = input("Senha: ").strip()

    try:
        response = httpx.post(
            f"{BASE_URL}/api/auth/login",
            json={"username": username, "password": password}
        )
        if response.status_code == 200:
            data = response.json()
            save_token(data["access_token"])
            print(f"\n✓ Login bem sucedido!")
            print(f"  Usuário: {data['user']['name']} ({data['user']['role']})")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro de conexão: {e}")


def cmd_users_list():
    """Lista moradores e funcionários"""
    try:
        response = httpx.get(f"{BASE_URL}/api/users", headers=get_headers())
        if response.status_code == 200:
            users = sorted(response.json(), key=lambda u: (u["house_number"], u["name"]))
            print(f"\n{'='*80}")
            print(f"{'ID':<36} | {'Nome':<20} | {'Usuário':<12} | {'Unid.':<5} | {'Papel':<10}")
            print(f"{'='*80}")
            for u in users:
                print(f"{u['id']:<36} | {u['name'][:20]:<20} | {u['username'][:12]:<12} | {u['house_number']:<5} | {u['role']:<10}")
            print(f"\nTotal: {len(users)} usuários")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_users_role(user_id: str, role: str):
    """Altera o papel de um usuário"""
    if role not in ROLES:
        print(f"✗ Papel inválido: {role}. Use um de: {', '.join(ROLES)}")
        return

    try:
        response = httpx.patch(
            f"{BASE_URL}/api/users/{user_id}/role",
            json={"role": role},
            headers=get_headers()
        )
        if response.status_code == 200:
            print(f"✓ {response.json()['message']}")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_reservations_list(day: str = None):
    """Lista reservas (todas ou de um dia)"""
    params = {"date": day} if day else {}
    try:
        response = httpx.get(f"{BASE_URL}/api/reservations", params=params, headers=get_headers())
        if response.status_code == 200:
            reservations = sorted(response.json(), key=lambda r: (r["date"], r["area"]))
            print(f"\n{'='*60}")
            print(f"{'Data':<10} | {'Área':<16} | {'Unid.':<5} | {'Responsável':<20}")
            print(f"{'='*60}")
            for r in reservations:
                area = AREAS.get(r["area"], r["area"])
                print(f"{r['date']:<10} | {area:<16} | {r['house_number']:<5} | {r['user_name'][:20]:<20}")
            print(f"\nTotal: {len(reservations)} reservas")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_stats(start: str = None, end: str = None):
    """Mostra estatísticas das pendências"""
    params = {key: value for key, value in (("start", start), ("end", end)) if value}
    try:
        response = httpx.get(f"{BASE_URL}/api/requests/stats", params=params, headers=get_headers())
        if response.status_code == 200:
            stats = response.json()
            print(f"\n{'='*40}")
            print(f"  PENDÊNCIAS DO CONDOMÍNIO")
            print(f"{'='*40}")
            print(f"  Total: {stats['total']}")
            for title, key in (("Por status", "by_status"), ("Por setor", "by_sector"), ("Por tipo", "by_type")):
                print(f"  {title}:")
                for name, count in sorted(stats[key].items(), key=lambda item: -item[1]):
                    print(f"    - {name}: {count}")
            print(f"{'='*40}")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_alert(message: str):
    """Dispara alerta SOS para todos os moradores"""
    try:
        response = httpx.post(f"{BASE_URL}/api/push/alert", json={"message": message}, headers=get_headers())
        if response.status_code == 200:
            print(f"✓ {response.json()['message']}")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def cmd_purge():
    """Remove pendências e reservas antigas"""
    confirm = input("Remover TODAS as pendências e reservas? [s/N]: ").strip().lower()
    if confirm != "s":
        print("Cancelado.")
        return

    try:
        response = httpx.post(f"{BASE_URL}/api/users/maintenance/purge", headers=get_headers())
        if response.status_code == 200:
            data = response.json()
            print(f"✓ {data['message']} ({data['removed']} documento(s))")
        else:
            print(f"✗ Erro: {error_detail(response)}")
    except httpx.HTTPError as e:
        print(f"✗ Erro: {e}")


def print_help():
    print(f"""
Condo Sync - CLI Admin
======================

Comandos disponíveis:

  python admin_cli.py login                              - Fazer login
  python admin_cli.py stats [inicio] [fim]               - Estatísticas de pendências

  python admin_cli.py users list                         - Listar usuários
  python admin_cli.py users role <user_id> <papel>       - Alterar papel
                                                           Papéis: {', '.join(ROLES)}

  python admin_cli.py reservations list [AAAA-MM-DD]     - Listar reservas

  python admin_cli.py alert "mensagem"                   - Alerta SOS
  python admin_cli.py purge                              - Limpar dados antigos

Servidor: {BASE_URL} (variável CONDO_SYNC_URL)
""")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print_help()
        sys.exit(0)

    cmd = sys.argv[1].lower()

    if cmd == "login":
        cmd_login()
    elif cmd == "stats":
        cmd_stats(*sys.argv[2:4])
    elif cmd == "users":
        if len(sys.argv) < 3:
            print("Uso: users [list|role]")
        elif sys.argv[2] == "list":
            cmd_users_list()
        elif sys.argv[2] == "role" and len(sys.argv) >= 5:
            cmd_users_role(sys.argv[3], sys.argv[4])
        else:
            print("Uso: users role <user_id> <papel>")
    elif cmd == "reservations":
        if len(sys.argv) >= 3 and sys.argv[2] == "list":
            cmd_reservations_list(sys.argv[3] if len(sys.argv) > 3 else None)
        else:
            print("Uso: reservations list [AAAA-MM-DD]")
    elif cmd == "alert" and len(sys.argv) >= 3:
        cmd_alert(" ".join(sys.argv[2:]))
    elif cmd == "purge":
        cmd_purge()
    elif cmd == "help":
        print_help()
    else:
        print(f"Comando desconhecido: {cmd}")
        print_help()
