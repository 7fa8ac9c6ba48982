"""
training_data.py

Seed phrases for the intent classifier. Each entry is a two-element
tuple of the form (`phrase`, `intent`). Phrases are written the way they
look after normalization (lowercase, slang expanded). The list is static
configuration: the classifier is trained on it once per process.

Words that anchor an intent (e.g. "pemasukan", "laporan", "riwayat",
"progress") should appear under that intent only, otherwise short
messages lose confidence and fall back to `unknown`. Goal names and goal
types ("tabungan", "rumah", "dana darurat") stay out of the seed set: they
show up in create, update and delete commands alike.
"""

TRAINING_DATA = [
    # Expenses
    ("catat pengeluaran", "add_expense"),
    ("tambah pengeluaran", "add_expense"),
    ("keluar uang", "add_expense"),
    ("bayar", "add_expense"),
    ("beli", "add_expense"),
    ("pengeluaran makan siang", "add_expense"),
    ("bayar grab", "add_expense"),
    ("beli kopi", "add_expense"),
    ("habis uang untuk belanja", "add_expense"),
    ("jajan", "add_expense"),

    # Income
    ("catat pemasukan", "add_income"),
    ("tambah pemasukan", "add_income"),
    ("terima uang", "add_income"),
    ("dapat uang", "add_income"),
    ("gajian", "add_income"),
    ("terima gaji", "add_income"),
    ("dapat bonus", "add_income"),
    ("pemasukan dari proyek", "add_income"),

    # Reports
    ("lihat laporan", "view_report"),
    ("tampilkan laporan", "view_report"),
    ("report keuangan", "view_report"),
    ("rangkuman", "view_report"),
    ("rekap", "view_report"),
    ("laporan bulanan", "view_report"),
    ("ringkasan keuangan", "view_report"),

    # Budget
    ("atur budget", "set_budget"),
    ("tentukan anggaran", "set_budget"),
    ("set limit", "set_budget"),
    ("batas pengeluaran", "set_budget"),
    ("buat budget", "set_budget"),
    ("pasang limit anggaran", "set_budget"),

    ("cek budget", "check_budget"),
    ("lihat sisa budget", "check_budget"),
    ("sisa anggaran", "check_budget"),
    ("budget bulanan", "check_budget"),
    ("status budget", "check_budget"),
    ("cek anggaran", "check_budget"),

    # History
    ("riwayat transaksi", "transaction_history"),
    ("lihat transaksi", "transaction_history"),
    ("history", "transaction_history"),
    ("mutasi", "transaction_history"),
    ("lihat riwayat", "transaction_history"),
    ("tampilkan mutasi", "transaction_history"),
    ("daftar transaksi", "transaction_history"),

    # Goals
    ("tambah goal", "tambah_goal"),
    ("buat goal", "tambah_goal"),
    ("goal baru", "tambah_goal"),
    ("target baru", "tambah_goal"),
    ("bikin goal", "tambah_goal"),
    ("tambah target", "tambah_goal"),
    ("buat target baru", "tambah_goal"),

    ("lihat goal", "lihat_goal"),
    ("cek goal", "lihat_goal"),
    ("status goal", "lihat_goal"),
    ("daftar goal", "lihat_goal"),
    ("lihat target", "lihat_goal"),
    ("goal saya apa saja", "lihat_goal"),

    ("update goal", "update_goal"),
    ("perbarui goal", "update_goal"),
    ("progress goal", "update_goal"),
    ("tambah progress", "update_goal"),
    ("tambah progress goal", "update_goal"),
    ("update target", "update_goal"),
    ("setor goal", "update_goal"),

    ("hapus goal", "hapus_goal"),
    ("batalkan goal", "hapus_goal"),
    ("selesai goal", "hapus_goal"),
    ("hapus target", "hapus_goal"),
    ("batal goal", "hapus_goal"),

    # Education
    ("tips keuangan", "tips"),
    ("saran keuangan", "tips"),
    ("edukasi", "tips"),
    ("pembelajaran", "tips"),
    ("minta tips", "tips"),
    ("kasih saran", "tips"),

    # Help
    ("bantuan", "help"),
    ("tolong", "help"),
    ("cara pakai", "help"),
    ("panduan", "help"),
    ("help", "help"),
    ("menu", "help"),
]
