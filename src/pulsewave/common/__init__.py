"""
どこで: `pulsewave.common`。
何を: ロギング/環境変数/設定/例外などの横断的ユーティリティ。
"""
