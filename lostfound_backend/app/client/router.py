# app/client/router.py
"""
싱글 페이지 애플리케이션의 라우트 테이블과 가드.

- ROUTES: URL 경로 패턴(':name' 파라미터)과 페이지 뷰 이름의 선언적 매핑
- ClientRouter.resolve(): 경로를 페이지로 해석하고, 가드에 걸리면 리다이렉트 경로를 돌려줌
- evict_expired_token(): 앱 시작 시 만료된 인증 토큰을 로컬 저장소에서 제거

여기서 읽는 토큰/플래그는 모두 클라이언트가 보관하는 값이므로 화면 흐름을 위한 장치일 뿐이며,
실제 권한 검사는 서버의 각 요청에서 다시 이루어집니다.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, List, MutableMapping, Mapping

from jwt.utils import base64url_decode
from werkzeug.exceptions import NotFound, MethodNotAllowed
from werkzeug.routing import Map, Rule, RequestRedirect

from app.utils.datetime_utils import DateTimeUtils

# 로컬 저장소 키
AUTH_TOKEN_KEY = 'authToken'
ADMIN_TOKEN_KEY = 'adminToken'

# 가드 종류
GUARD_AUTH = 'auth'
GUARD_ADMIN = 'admin'

LOGIN_PATH = '/login'
ADMIN_LOGIN_PATH = '/admin/login'


@dataclass(frozen=True)
class PageRoute:
    path: str
    page: str
    guard: Optional[str] = None


@dataclass
class RouteResolution:
    """경로 해석 결과. redirect_to가 있으면 page 대신 그 경로로 이동해야 합니다."""
    route: PageRoute
    params: Dict[str, str] = field(default_factory=dict)
    redirect_to: Optional[str] = None

    @property
    def page(self) -> str:
        return self.route.page

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None


ROUTES: List[PageRoute] = [
    # --- 사용자 라우트 ---
    PageRoute('/bookmarks', 'BookmarksPage'),
    PageRoute('/admin/reports', 'AdminReportPage'),
    PageRoute('/', 'LandingPage'),
    PageRoute('/post/:id', 'PostDetailsPage'),
    PageRoute('/create', 'PostForm', guard=GUARD_AUTH),
    PageRoute('/signup', 'SignUp'),
    PageRoute('/login', 'Login'),
    PageRoute('/profile', 'ProfilePage'),
    PageRoute('/userdashboard', 'UserDashboard'),
    PageRoute('/recent', 'RecentPostsPage'),
    PageRoute('/my-posts', 'MyPostsPage'),
    PageRoute('/edit-post/:id', 'EditPostPage'),
    PageRoute('/edit-profile', 'EditProfile'),
    PageRoute('/faq', 'FAQPage'),
    PageRoute('/my-reports', 'ViewMyReportsPage'),
    PageRoute('/leaderboard', 'Leaderboard'),
    PageRoute('/visituserprofile/:userId', 'VisitUserProfile'),

    # --- 관리자 라우트 ---
    # auto-matching-result만 관리자 가드가 걸려 있고 나머지는 가드 없이 등록되어 있습니다.
    PageRoute('/admin/login', 'AdminLogin'),
    PageRoute('/dashboard', 'Dashboard'),
    PageRoute('/admin/posts', 'PostManagement'),
    PageRoute('/admin/users', 'UserManagement'),
    PageRoute('/auto-matching-result', 'AutoMatchingResult', guard=GUARD_ADMIN),
    PageRoute('/admin/history', 'PostHistoryPage'),
]

_param_re = re.compile(r':([A-Za-z_][A-Za-z0-9_]*)')


def _to_rule_path(path: str) -> str:
    """'/post/:id' 형식을 werkzeug 규칙 '/post/<id>'로 바꿉니다."""
    return _param_re.sub(r'<\1>', path)


def is_authenticated(storage: Mapping[str, str]) -> bool:
    return storage.get(AUTH_TOKEN_KEY) is not None


def is_admin(storage: Mapping[str, str]) -> bool:
    return storage.get(ADMIN_TOKEN_KEY) is not None


class ClientRouter:
    """라우트 테이블을 werkzeug Map으로 컴파일해 경로를 페이지로 해석합니다."""

    def __init__(self, routes: Optional[List[PageRoute]] = None):
        self.routes = list(routes if routes is not None else ROUTES)
        self._routes_by_path = {route.path: route for route in self.routes}
        self._url_map = Map(
            [Rule(_to_rule_path(route.path), endpoint=route.path) for route in self.routes],
            strict_slashes=False,
            merge_slashes=False,
        )

    def match(self, path: str):
        """경로에 맞는 (PageRoute, params)를 반환합니다. 없으면 None."""
        adapter = self._url_map.bind('localhost')
        try:
            endpoint, params = adapter.match(path, method="GET")
        except (NotFound, MethodNotAllowed, RequestRedirect):
            # 리다이렉트가 필요한 경로도 등록된 경로와 같지 않으므로 미등록으로 봅니다.
            return None
        return self._routes_by_path[endpoint], params

    def resolve(self, path: str, storage: Mapping[str, str]) -> Optional[RouteResolution]:
        """
        경로를 페이지로 해석하고 가드를 적용합니다.
        - 인증 가드: authToken이 없으면 /login으로
        - 관리자 가드: adminToken이 없으면 /admin/login으로
        등록되지 않은 경로는 None을 반환합니다.
        """
        matched = self.match(path)
        if matched is None:
            return None

        route, params = matched
        redirect_to = None
        if route.guard == GUARD_AUTH and not is_authenticated(storage):
            redirect_to = LOGIN_PATH
        elif route.guard == GUARD_ADMIN and not is_admin(storage):
            redirect_to = ADMIN_LOGIN_PATH
        return RouteResolution(route=route, params=params, redirect_to=redirect_to)


def _read_payload(token: str) -> dict:
    """
    토큰의 두 번째 세그먼트(payload)만 base64url 디코딩해 JSON으로 읽습니다.
    헤더와 서명 세그먼트는 보지 않으므로 'header.payload' 형태도 읽힙니다.
    """
    segments = token.split('.')
    if len(segments) < 2:
        raise ValueError("payload 세그먼트가 없습니다")
    # base64/JSON/UTF-8 오류는 모두 ValueError 하위 클래스입니다.
    payload = json.loads(base64url_decode(segments[1]))
    if not isinstance(payload, dict):
        raise ValueError("payload가 JSON 객체가 아닙니다")
    return payload


def evict_expired_token(storage: MutableMapping[str, str], now: Optional[datetime] = None) -> bool:
    """
    앱 시작 시 한 번 호출됩니다. 저장된 authToken의 'exp' 클레임이 지났으면 토큰을 제거합니다.
    서명은 검증하지 않습니다 (클라이언트에는 비밀키가 없음).

    :return: 토큰을 제거했으면 True
    """
    token = storage.get(AUTH_TOKEN_KEY)
    if not token:
        return False

    try:
        payload = _read_payload(token)
    except ValueError as e:
        logging.warning(f"해독할 수 없는 인증 토큰을 제거합니다: {e}")
        del storage[AUTH_TOKEN_KEY]
        return True

    exp = payload.get('exp')
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return False

    now_ms = DateTimeUtils.to_timestamp_ms(now or DateTimeUtils.now())
    if now_ms > exp * 1000:
        del storage[AUTH_TOKEN_KEY]
        logging.info("만료된 인증 토큰을 로컬 저장소에서 제거했습니다.")
        return True
    return False
