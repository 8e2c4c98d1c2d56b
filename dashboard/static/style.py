from nicegui import ui

BRAND_BLUE = '#2e4a74'
ACCENT = '#20b389'
BG = '#0f172a'
CARD_BG = '#111827'
BORDER = '#1e293b'


def change_colors():
    ui.colors(primary=BRAND_BLUE, secondary=ACCENT, accent=ACCENT)


def add_style():
    ui.add_head_html("""
        <link href="https://fonts.googleapis.com/css?family=Montserrat:700,400&display=swap" rel="stylesheet">
        <style>
        html, body {
        width: 100%;
        min-height: 100vh;
        overflow-x: hidden;
        box-sizing: border-box;
        font-family: 'Montserrat', Arial, sans-serif;
        background: #0f172a;
        color: #e2e8f0;
        margin: 0;
        }
        body {
        display: flex;
        flex-direction: column;
        min-height: 100vh;
        margin: 0;
        }
        *, *::before, *::after {
            box-sizing: inherit;
        }
        .navbar {
        width: 100%;
        position: relative;
        background: #2d4c7c;
        color: #fff;
        display: flex;
        justify-content: space-between;
        align-items: center;
        padding: 20px 40px;
        }
        .nav-left, .nav-right{
        display:flex; align-items:center; gap:2px;
        }
        .navbar a {
        color: #fff;
        text-decoration: none;
        margin-left: 32px;
        font-weight: 500;
        font-size: 1.1em;
        transition: color .2s;
        }
        .navbar a:hover {
        color: #43e97b;
        }
        .footer {
        width: 100%;
        flex-shrink: 0;
        margin-top: auto;
        background: #2d4c7c;
        color: #fff;
        padding: 24px 40px;
        display: flex;
        justify-content: space-between;
        align-items: center;
        }
        .footer a {
        color: #43e97b;
        text-decoration: none;
        margin-left: 18px;
        }
        @media (max-width: 900px) {
        .navbar, .footer { flex-direction: column; gap: 8px;}
        }
        </style>
        """)


def add_chart_style():
    ui.add_head_html("""
    <style>
        .q-card.elevated-card {
            background:#111827 !important; border:1px solid #1e293b !important; border-radius:14px !important;
            box-shadow:0 10px 24px rgba(2,6,23,.45) !important;
            color:#e2e8f0;
        }
        .header-title{
            font-size:24px;
            font-weight:900;
            color:#e2e8f0;
            margin:0;
            letter-spacing:.2px;
        }
        .muted{ color:#94a3b8; font-size:12px; }
        .chart-host{ width:100%; min-height:40px; display:flex; flex-direction:column; gap:4px; }
        .pattern-badge{
            display:inline-flex; align-items:center; gap:4px;
            padding:2px 10px; border-radius:999px; font-size:12px; border:1px solid;
        }
        .pattern-bullish{ color:#4ade80; background:rgba(34,197,94,.10); border-color:rgba(34,197,94,.30); }
        .pattern-bearish{ color:#f87171; background:rgba(239,68,68,.10); border-color:rgba(239,68,68,.30); }
        .pattern-neutral{ color:#fbbf24; background:rgba(245,158,11,.10); border-color:rgba(245,158,11,.30); }
    </style>
    """)
