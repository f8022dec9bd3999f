import casamento.infrastructure.models
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Usuario',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='Endereço de E-mail')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'Usuário',
                'verbose_name_plural': 'Usuários',
                'db_table': 'infra_usuario',
            },
            managers=[
                ('objects', casamento.infrastructure.models.CustomUserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Convidado',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=100, verbose_name='Nome')),
                ('telefone', models.CharField(db_index=True, max_length=20, verbose_name='Telefone')),
                ('faixa_etaria', models.CharField(choices=[('adult', 'Adulto'), ('child', 'Criança')], default='adult', max_length=10, verbose_name='Faixa Etária')),
                ('confirmado', models.BooleanField(default=False, verbose_name='Presença Confirmada')),
                ('data_confirmacao', models.DateTimeField(blank=True, null=True, verbose_name='Data da Confirmação')),
            ],
            options={
                'verbose_name': 'Convidado',
                'verbose_name_plural': 'Convidados',
                'db_table': 'convidados',
                'ordering': ['nome'],
            },
        ),
        migrations.CreateModel(
            name='Presente',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=100, verbose_name='Nome')),
                ('descricao', models.TextField(blank=True, null=True, verbose_name='Descrição')),
                ('imagem_url', models.TextField(blank=True, null=True, verbose_name='URL da Imagem')),
                ('preco', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Preço')),
                ('disponivel', models.BooleanField(default=True, verbose_name='Disponível')),
                ('criado_em', models.DateTimeField(auto_now_add=True, verbose_name='Criado em')),
            ],
            options={
                'verbose_name': 'Presente',
                'verbose_name_plural': 'Presentes',
                'db_table': 'presentes',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Memoria',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.TextField(verbose_name='URL')),
                ('descricao', models.TextField(blank=True, null=True, verbose_name='Descrição')),
                ('enviado_em', models.DateTimeField(auto_now_add=True, verbose_name='Enviado em')),
            ],
            options={
                'verbose_name': 'Memória',
                'verbose_name_plural': 'Memórias',
                'db_table': 'memorias',
                'ordering': ['-enviado_em'],
            },
        ),
        migrations.CreateModel(
            name='Compra',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_comprador', models.CharField(max_length=100, verbose_name='Nome do Comprador')),
                ('telefone_comprador', models.CharField(max_length=20, verbose_name='Telefone do Comprador')),
                ('email_comprador', models.CharField(blank=True, max_length=100, null=True, verbose_name='E-mail do Comprador')),
                ('documento_comprador', models.CharField(max_length=14, verbose_name='CPF/CNPJ do Comprador')),
                ('metodo_pagamento', models.CharField(choices=[('pix', 'PIX'), ('card', 'Cartão')], default='pix', max_length=10)),
                ('status_pagamento', models.CharField(choices=[('pending', 'Pendente'), ('paid', 'Pago'), ('failed', 'Falhou'), ('expired', 'Expirado'), ('cancelled', 'Cancelado')], db_index=True, default='pending', max_length=20)),
                ('pagamento_id', models.CharField(blank=True, db_index=True, max_length=255, null=True)),
                ('pix_cobranca_id', models.CharField(blank=True, db_index=True, max_length=255, null=True)),
                ('pix_qr_code', models.TextField(blank=True, null=True)),
                ('pix_qr_code_base64', models.TextField(blank=True, null=True)),
                ('expira_em', models.DateTimeField(blank=True, null=True, verbose_name='Expira em')),
                ('metadados', models.JSONField(blank=True, default=dict)),
                ('comprado_em', models.DateTimeField(auto_now_add=True, verbose_name='Comprado em')),
                ('atualizado_em', models.DateTimeField(auto_now=True, verbose_name='Atualizado em')),
                ('convidado', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='compras', to='infrastructure.convidado')),
                ('presente', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='compras', to='infrastructure.presente')),
            ],
            options={
                'verbose_name': 'Compra',
                'verbose_name_plural': 'Compras',
                'db_table': 'compras',
                'ordering': ['comprado_em', 'id'],
            },
        ),
    ]
