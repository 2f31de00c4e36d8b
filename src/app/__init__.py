"""
App layer: REST API 서버 (FastAPI).

역할:
- HTTP 요청 → CompositionEngine 연산 호출
- 도메인 에러 → HTTP 상태 코드 매핑
- ⚠️ 구성 규칙 로직 없음 (templates 레이어에 위임)
"""
